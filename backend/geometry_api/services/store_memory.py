"""In-memory store backend implementation.

Keeps records in a dict guarded by a single asyncio lock owned by the
store instance. The lock is held for the whole life of a transaction,
reads included, so operations never interleave. Each transaction works
on a private copy of the record map; commit swaps it in.
Used for single-process deployments and tests.
"""
import asyncio
from typing import Optional

from geometry_api.services.errors import StoreConflictError, StoreError
from geometry_api.services.store_base import (
    GeometryRecord,
    GeometryStore,
    NewGeometry,
    StoreTransaction,
)


def _name_key(name: str) -> str:
    return name.strip().lower()


def _matches(record: GeometryRecord, search: Optional[str]) -> bool:
    return not search or search.lower() in record.name.lower()


class MemoryTransaction(StoreTransaction):
    """Transaction over a staged copy of the store's records."""

    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._records: dict[int, GeometryRecord] = dict(store._records)
        self._next_id = store._next_id
        self._finished = False

    def _ensure_open(self) -> None:
        if self._finished:
            raise StoreError("Transaction is already finished")

    def _conflict(self, name: str, exclude_id: Optional[int]) -> bool:
        key = _name_key(name)
        return any(
            _name_key(r.name) == key and r.id != exclude_id
            for r in self._records.values()
        )

    async def get(self, record_id: int) -> Optional[GeometryRecord]:
        self._ensure_open()
        return self._records.get(record_id)

    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        self._ensure_open()
        return self._conflict(name, exclude_id)

    async def insert(self, item: NewGeometry) -> GeometryRecord:
        self._ensure_open()
        if self._conflict(item.name, None):
            raise StoreConflictError(f"Duplicate name: {item.name}")
        self._next_id += 1
        record = GeometryRecord(
            id=self._next_id,
            name=item.name,
            type=item.type,
            wkt=item.wkt,
            geometry=item.geometry,
        )
        self._records[record.id] = record
        return record

    async def update(self, record: GeometryRecord) -> GeometryRecord:
        self._ensure_open()
        if record.id not in self._records:
            raise StoreError(f"Geometry {record.id} does not exist")
        if self._conflict(record.name, record.id):
            raise StoreConflictError(f"Duplicate name: {record.name}")
        self._records[record.id] = record
        return record

    async def delete(self, record_id: int) -> bool:
        self._ensure_open()
        return self._records.pop(record_id, None) is not None

    async def list_all(self) -> list[GeometryRecord]:
        self._ensure_open()
        return [self._records[k] for k in sorted(self._records)]

    async def count(self, search: Optional[str] = None) -> int:
        self._ensure_open()
        return sum(1 for r in self._records.values() if _matches(r, search))

    async def fetch(
        self, offset: int, limit: int, search: Optional[str] = None
    ) -> list[GeometryRecord]:
        self._ensure_open()
        matched = [r for r in await self.list_all() if _matches(r, search)]
        return matched[offset:offset + limit]

    async def commit(self) -> None:
        self._ensure_open()
        self._store._records = self._records
        self._store._next_id = self._next_id
        self._finished = True

    async def rollback(self) -> None:
        self._finished = True


class MemoryStore(GeometryStore):
    """Store backend keeping records in process memory."""

    def __init__(self):
        self._records: dict[int, GeometryRecord] = {}
        self._next_id = 0
        self._lock = asyncio.Lock()

    async def _open(self) -> StoreTransaction:
        await self._lock.acquire()
        return MemoryTransaction(self)

    async def _release(self, tx: StoreTransaction) -> None:
        self._lock.release()
