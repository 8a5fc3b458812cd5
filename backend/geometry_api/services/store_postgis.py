"""PostGIS store backend implementation.

One AsyncSession per transaction. Name uniqueness is ultimately enforced by
the unique index on lower(name); IntegrityError from flush or commit is
reported as StoreConflictError so the service can answer 409 even when two
writers race past the application-level check.
"""
import logging
from typing import Optional

import shapely
from geoalchemy2.shape import from_shape, to_shape
from sqlalchemy import func, select, true
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from geometry_api.database import create_engine_for, create_session_factory, create_tables
from geometry_api.models.geometry import GeometryItem
from geometry_api.services.errors import StoreConflictError, StoreError
from geometry_api.services.geometry_check import SRID
from geometry_api.services.geometry_types import GeometryType
from geometry_api.services.store_base import (
    GeometryRecord,
    GeometryStore,
    NewGeometry,
    StoreTransaction,
)

logger = logging.getLogger("geometry_api.store.postgis")


def _to_record(item: GeometryItem) -> GeometryRecord:
    geometry = shapely.set_srid(to_shape(item.geom), SRID) if item.geom is not None else None
    return GeometryRecord(
        id=item.id,
        name=item.name,
        type=GeometryType(item.type),
        wkt=item.wkt,
        geometry=geometry,
    )


def _name_filter(search: Optional[str]):
    if not search:
        return true()
    return GeometryItem.name.icontains(search, autoescape=True)


class PostgisTransaction(StoreTransaction):
    """Transaction bound to a single AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._finished = False

    async def _flush(self, name: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise StoreConflictError(f"Duplicate name: {name}") from e
        except SQLAlchemyError as e:
            raise StoreError(f"Storage error: {e}") from e

    async def _execute(self, statement):
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise StoreError(f"Storage error: {e}") from e

    async def _get_row(self, record_id: int) -> Optional[GeometryItem]:
        try:
            return await self.session.get(GeometryItem, record_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Storage error: {e}") from e

    async def get(self, record_id: int) -> Optional[GeometryRecord]:
        item = await self._get_row(record_id)
        return _to_record(item) if item else None

    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = select(func.count(GeometryItem.id)).where(
            func.lower(func.trim(GeometryItem.name)) == name.strip().lower()
        )
        if exclude_id is not None:
            query = query.where(GeometryItem.id != exclude_id)
        result = await self._execute(query)
        return result.scalar_one() > 0

    async def insert(self, item: NewGeometry) -> GeometryRecord:
        row = GeometryItem(
            name=item.name,
            type=int(item.type),
            wkt=item.wkt,
            geom=from_shape(item.geometry, srid=SRID),
        )
        self.session.add(row)
        await self._flush(item.name)
        return GeometryRecord(
            id=row.id,
            name=row.name,
            type=item.type,
            wkt=row.wkt,
            geometry=shapely.set_srid(item.geometry, SRID),
        )

    async def update(self, record: GeometryRecord) -> GeometryRecord:
        row = await self._get_row(record.id)
        if row is None:
            raise StoreError(f"Geometry {record.id} does not exist")
        row.name = record.name
        row.type = int(record.type)
        row.wkt = record.wkt
        row.geom = from_shape(record.geometry, srid=SRID)
        await self._flush(record.name)
        return record

    async def delete(self, record_id: int) -> bool:
        row = await self._get_row(record_id)
        if row is None:
            return False
        try:
            await self.session.delete(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Storage error: {e}") from e
        await self._flush(row.name)
        return True

    async def list_all(self) -> list[GeometryRecord]:
        result = await self._execute(select(GeometryItem).order_by(GeometryItem.id))
        return [_to_record(item) for item in result.scalars().all()]

    async def count(self, search: Optional[str] = None) -> int:
        result = await self._execute(
            select(func.count(GeometryItem.id)).where(_name_filter(search))
        )
        return result.scalar_one()

    async def fetch(
        self, offset: int, limit: int, search: Optional[str] = None
    ) -> list[GeometryRecord]:
        result = await self._execute(
            select(GeometryItem)
            .where(_name_filter(search))
            .order_by(GeometryItem.id)
            .offset(offset)
            .limit(limit)
        )
        return [_to_record(item) for item in result.scalars().all()]

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            raise StoreConflictError("Name must be unique") from e
        except SQLAlchemyError as e:
            raise StoreError(f"Storage error: {e}") from e
        self._finished = True

    async def rollback(self) -> None:
        if self._finished:
            return
        self._finished = True
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            raise StoreError(f"Storage error: {e}") from e


class PostgisStore(GeometryStore):
    """Store backend using a PostGIS database through SQLAlchemy."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[AsyncEngine] = None,
        echo: bool = False,
    ):
        if engine is None:
            if not database_url:
                raise ValueError("database_url or engine is required")
            engine = create_engine_for(database_url, echo=echo)
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    async def create_tables(self) -> None:
        await create_tables(self.engine)

    async def _open(self) -> StoreTransaction:
        session = self.session_factory()
        try:
            await session.begin()
        except SQLAlchemyError as e:
            await session.close()
            raise StoreError(f"Storage error: {e}") from e
        return PostgisTransaction(session)

    async def _release(self, tx: StoreTransaction) -> None:
        await tx.session.close()

    async def close(self) -> None:
        logger.info("Disposing database engine")
        await self.engine.dispose()
