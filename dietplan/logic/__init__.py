"""Core business logic layer.

Subpackages:
- tracking: the completion ledger (date-scoped toggles and history)
- progress: completed/total counts and percentages per day, category and week
- planning: copy-on-write edits of a plan's day/category slots
- reporting: nutrition totals and targets
"""
__all__ = ["tracking", "progress", "planning", "reporting"]
