"""Geometry store abstract base classes.

Defines the interface for all store backends (in-memory, PostGIS).
Consumers open a transaction with ``async with store.transaction() as tx``
and must call ``await tx.commit()`` explicitly; leaving the block without
committing rolls back. The lock or connection behind a transaction is
always released when the block exits.
"""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from shapely.geometry.base import BaseGeometry

from geometry_api.services.geometry_types import GeometryType


@dataclass(frozen=True)
class GeometryRecord:
    """Immutable snapshot of a stored geometry."""

    id: int
    name: str
    type: GeometryType
    wkt: str
    geometry: Optional[BaseGeometry] = None


@dataclass(frozen=True)
class NewGeometry:
    """A validated record waiting for an id."""

    name: str
    type: GeometryType
    wkt: str
    geometry: BaseGeometry


class StoreTransaction(ABC):
    """Unit of work against a store."""

    @abstractmethod
    async def get(self, record_id: int) -> Optional[GeometryRecord]:
        """Load one record by id."""
        ...

    @abstractmethod
    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """Whether another record already uses ``name`` (trimmed, case-insensitive)."""
        ...

    @abstractmethod
    async def insert(self, item: NewGeometry) -> GeometryRecord:
        """Stage an insert and return the record with its assigned id.

        Raises:
            StoreConflictError: the store's uniqueness constraint rejected it
            StoreError: any other storage failure
        """
        ...

    @abstractmethod
    async def update(self, record: GeometryRecord) -> GeometryRecord:
        """Stage an update of all mutable fields of ``record``."""
        ...

    @abstractmethod
    async def delete(self, record_id: int) -> bool:
        """Stage removal; returns False if the id is unknown."""
        ...

    @abstractmethod
    async def list_all(self) -> list[GeometryRecord]:
        """All records ordered by id."""
        ...

    @abstractmethod
    async def count(self, search: Optional[str] = None) -> int:
        """Number of records whose name contains ``search`` (case-insensitive)."""
        ...

    @abstractmethod
    async def fetch(
        self, offset: int, limit: int, search: Optional[str] = None
    ) -> list[GeometryRecord]:
        """Window of filtered records ordered by id."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Make staged changes visible.

        Raises:
            StoreConflictError: a uniqueness constraint failed at commit
            StoreError: any other storage failure
        """
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard staged changes. Safe to call more than once."""
        ...


class GeometryStore(ABC):
    """Abstract base class for geometry stores."""

    @abstractmethod
    async def _open(self) -> StoreTransaction:
        """Acquire resources and begin a transaction."""
        ...

    @abstractmethod
    async def _release(self, tx: StoreTransaction) -> None:
        """Release the resources held by ``tx``."""
        ...

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreTransaction]:
        """Open a transaction; roll back and release on exit if not committed."""
        tx = await self._open()
        try:
            yield tx
        finally:
            try:
                await tx.rollback()
            finally:
                await self._release(tx)

    async def close(self) -> None:
        """Dispose of store-wide resources (engines, pools)."""
        return None
