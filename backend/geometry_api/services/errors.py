"""Error taxonomy for the geometry pipeline.

Pipeline steps do not raise these; they return them inside a StepResult so
the writer can decide explicitly whether to roll back. Store backends do
raise StoreError/StoreConflictError because those originate in I/O.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class GeometryServiceError(Exception):
    """Base class for all reportable pipeline failures."""

    status_code: int = 400
    kind: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GeometryServiceError):
    """Missing field, bad name, bad type code or header/type mismatch."""

    kind = "validation"


class GeometryError(GeometryServiceError):
    """Unparsable text, too few points or unclosed polygon ring."""

    kind = "geometry"


class ConflictError(GeometryServiceError):
    status_code = 409
    kind = "conflict"


class NotFoundError(GeometryServiceError):
    status_code = 404
    kind = "not_found"


class NoopError(GeometryServiceError):
    kind = "noop"


class TransactionError(GeometryServiceError):
    """First failure inside a batch; the whole batch was rolled back."""

    kind = "transaction"

    def __init__(self, cause: GeometryServiceError, index: int):
        super().__init__(f"Item {index}: {cause.message}")
        self.cause = cause
        self.index = index
        self.status_code = cause.status_code


class StoreError(GeometryServiceError):
    """I/O failure in the backing store."""

    status_code = 500
    kind = "store"


class StoreConflictError(StoreError):
    """The store's own uniqueness constraint rejected a write."""

    status_code = 409
    kind = "conflict"


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Outcome of one pipeline step: a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[GeometryServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: GeometryServiceError) -> "StepResult[T]":
        return cls(error=error)
