"""Error taxonomy for the import core."""

from __future__ import annotations

from typing import Literal

type StoreOperation = Literal["create", "update", "describe"]


class ReclinkError(RuntimeError):
    """Base class for errors raised by reclink."""


class ParseError(ReclinkError):
    """Raised when the raw input cannot be turned into records."""

    def __init__(self, message: str, *, row: int | None = None) -> None:
        super().__init__(message if row is None else f"row {row}: {message}")
        self.row = row


class StoreError(ReclinkError):
    """Raised by a store gateway when a read or write is rejected."""

    def __init__(self, message: str, *, collection: str, operation: StoreOperation) -> None:
        super().__init__(f"{operation} {collection}: {message}")
        self.collection = collection
        self.operation = operation


class ReconcileError(ReclinkError):
    """Raised when one record (or any of its nested relations) fails to reconcile."""

    def __init__(self, collection: str, cause: BaseException) -> None:
        super().__init__(f"Failed to reconcile {collection} record: {cause}")
        self.collection = collection
        self.cause = cause


def root_cause(error: BaseException) -> BaseException:
    """Return the first leaf exception of a (possibly nested) exception group."""

    current = error
    while isinstance(current, BaseExceptionGroup) and current.exceptions:
        current = current.exceptions[0]
    return current
