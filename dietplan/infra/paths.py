from pathlib import Path

from dietplan.utilities.config import DATA_DIR

# Centralized paths for data files (single source of truth)
PLANS_FILE_NAME = 'diet_plans.json'
COMPLETIONS_FILE_NAME = 'meal_completions.json'


def resolve_data_dir(data_dir=None) -> Path:
    """Return the directory holding the JSON stores, creating it on demand."""
    path = Path(data_dir) if data_dir is not None else DATA_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


__all__ = ['DATA_DIR', 'PLANS_FILE_NAME', 'COMPLETIONS_FILE_NAME', 'resolve_data_dir']
