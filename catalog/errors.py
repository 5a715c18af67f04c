"""
Exceptions raised by the catalog when an operation cannot complete.
"""


class CatalogError(Exception):
    """Base class for errors surfaced to the user as a notification."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """A required field is missing or a value is out of range."""


class FetchError(CatalogError):
    """An external metadata lookup failed or found nothing."""


class PersistenceError(CatalogError):
    """A store operation failed."""
