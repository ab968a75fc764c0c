"""Custom exceptions for watchlist and alert synchronization."""

from typing import Any, Optional

from .state import MutationErrorKind


class StockNotifierError(Exception):
    """Base exception for synchronization operations."""

    pass


class FetchError(StockNotifierError):
    """A read from the remote API failed."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        message = f"Failed to {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class MutationError(StockNotifierError):
    """An add or remove was not applied remotely.

    Attributes:
        kind: Why the mutation failed
        operation: Attempted operation ("add" or "remove")
        key: Identity key of the affected entity
    """

    def __init__(
        self,
        kind: MutationErrorKind,
        operation: str,
        key: Any,
        cause: Optional[Exception] = None,
    ):
        self.kind = kind
        self.operation = operation
        self.key = key
        self.cause = cause
        message = f"{operation} {key!r} failed ({kind.value})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class SearchError(StockNotifierError):
    """A symbol search failed. Callers degrade this to an empty result."""

    def __init__(self, query: str, cause: Optional[Exception] = None):
        self.query = query
        self.cause = cause
        super().__init__(f"Search for {query!r} failed: {cause}")


class PreferencesError(StockNotifierError):
    """Reading or writing the local preferences file failed."""

    pass
