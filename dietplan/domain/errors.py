"""Error kinds shared by the core and its collaborators.

"Not found" is not an error here: lookups return None or an empty list.
"""


class InvalidInputError(ValueError):
    """Malformed identifiers, unknown day keys/categories, negative nutrition values."""


class CollaboratorUnavailableError(RuntimeError):
    """Persistence or generation backend could not be reached. Safe to retry."""

    def __init__(self, message: str, collaborator: str = "persistence"):
        super().__init__(message)
        self.collaborator = collaborator
