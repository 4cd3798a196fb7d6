"""Errors raised by the stamp card package."""


class CatalogError(ValueError):
    """Raised when the stamp catalog file is missing entries or out of order."""


class InvalidProgressError(ValueError):
    """Raised when a stored progress payload breaks the progress invariants."""
