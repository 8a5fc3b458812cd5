"""Geometry service: the normalize -> validate -> persist pipeline.

Every operation returns an ApiResponse envelope. Pipeline steps return
StepResult values; when one fails inside a transaction the service rolls
back explicitly and reports that step's error. Field and geometry checks
for create run before a transaction is opened, so malformed input never
touches the store.
"""
import logging
from dataclasses import replace
from typing import Optional, Sequence

from geometry_api.schemas.geometry import (
    ApiResponse,
    GeometryIn,
    GeometryResponse,
    PaginationResponse,
)
from geometry_api.services.errors import (
    ConflictError,
    GeometryServiceError,
    NoopError,
    NotFoundError,
    StepResult,
    StoreConflictError,
    StoreError,
    TransactionError,
    ValidationError,
)
from geometry_api.services.geometry_check import check_geometry
from geometry_api.services.geometry_types import GeometryType
from geometry_api.services.pagination import fetch_page, validate_page_request
from geometry_api.services.store_base import (
    GeometryRecord,
    GeometryStore,
    NewGeometry,
    StoreTransaction,
)
from geometry_api.services.uniqueness import BatchNameGuard, ensure_unique_name
from geometry_api.services.validator import (
    MSG_PAYLOAD_REQUIRED,
    MSG_TYPE_RANGE,
    normalize_and_check_header,
    validate_fields,
    validate_header,
    validate_name,
)
from geometry_api.utils.audit import geometry_details, log_audit_event

logger = logging.getLogger(__name__)

MSG_NOT_FOUND = "Geometry not found"
MSG_NO_CHANGES = "No changes made"
MSG_EMPTY_BATCH = "Payload is empty"


def _to_response(record: GeometryRecord) -> GeometryResponse:
    return GeometryResponse.model_validate(record)


def _fail(error: GeometryServiceError) -> ApiResponse:
    return ApiResponse.from_error(error)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class GeometryService:
    """CRUD, batch insert and paged listing over a GeometryStore."""

    def __init__(
        self,
        store: GeometryStore,
        strict_topology: bool = True,
        max_page_size: Optional[int] = None,
    ):
        self.store = store
        self.strict_topology = strict_topology
        self.max_page_size = max_page_size

    # =========================
    # Pipeline steps
    # =========================

    def _prepare(self, payload: Optional[GeometryIn]) -> StepResult[NewGeometry]:
        """Validate fields and geometry; no store access."""
        fields = validate_fields(payload)
        if not fields.ok:
            return StepResult.fail(fields.error)

        gtype = GeometryType(payload.type)
        checked = check_geometry(gtype, fields.value, strict=self.strict_topology)
        if not checked.ok:
            return StepResult.fail(checked.error)

        return StepResult.success(
            NewGeometry(
                name=payload.name.strip(),
                type=gtype,
                wkt=fields.value,
                geometry=checked.value,
            )
        )

    async def _stage(
        self,
        tx: StoreTransaction,
        guard: BatchNameGuard,
        payload: Optional[GeometryIn],
    ) -> StepResult[GeometryRecord]:
        """validate -> geometry check -> uniqueness -> staged insert."""
        prepared = self._prepare(payload)
        if not prepared.ok:
            return StepResult.fail(prepared.error)

        item = prepared.value
        conflict = await guard.check(tx, item.name)
        if conflict:
            return StepResult.fail(conflict)

        try:
            record = await tx.insert(item)
        except StoreConflictError as e:
            return StepResult.fail(ConflictError(e.message))
        return StepResult.success(record)

    # =========================
    # READ
    # =========================

    async def get_all(self) -> ApiResponse[list[GeometryResponse]]:
        try:
            async with self.store.transaction() as tx:
                records = await tx.list_all()
        except StoreError as e:
            return self._store_failure("list", e)
        return ApiResponse[list[GeometryResponse]].ok(
            [_to_response(r) for r in records], "Listed"
        )

    async def get_by_id(self, record_id: int) -> ApiResponse[GeometryResponse]:
        try:
            async with self.store.transaction() as tx:
                record = await tx.get(record_id)
        except StoreError as e:
            return self._store_failure("get", e)
        if record is None:
            return _fail(NotFoundError(MSG_NOT_FOUND))
        return ApiResponse[GeometryResponse].ok(_to_response(record), "Found")

    async def get_record(self, record_id: int) -> Optional[GeometryRecord]:
        """Snapshot including the parsed geometry, or None."""
        async with self.store.transaction() as tx:
            return await tx.get(record_id)

    async def get_paged(
        self,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
    ) -> ApiResponse[PaginationResponse[GeometryResponse]]:
        error = validate_page_request(page, page_size, self.max_page_size)
        if error:
            return _fail(error)

        try:
            async with self.store.transaction() as tx:
                result = await fetch_page(tx, page, page_size, search)
        except StoreError as e:
            return self._store_failure("page", e)
        if not result.ok:
            return _fail(result.error)

        items, total_count, total_pages = result.value
        return ApiResponse[PaginationResponse[GeometryResponse]].ok(
            PaginationResponse[GeometryResponse](
                items=[_to_response(r) for r in items],
                total_count=total_count,
                total_pages=total_pages,
                page=page,
                page_size=page_size,
            ),
            "Listed",
        )

    # =========================
    # WRITE
    # =========================

    async def create(self, payload: Optional[GeometryIn]) -> ApiResponse[GeometryResponse]:
        prepared = self._prepare(payload)
        if not prepared.ok:
            return _fail(prepared.error)
        item = prepared.value

        try:
            async with self.store.transaction() as tx:
                conflict = await ensure_unique_name(tx, item.name)
                if conflict:
                    await tx.rollback()
                    return _fail(conflict)
                record = await tx.insert(item)
                await tx.commit()
        except StoreConflictError as e:
            return _fail(ConflictError(e.message))
        except StoreError as e:
            return self._store_failure("create", e)

        log_audit_event("geometry_created", details=geometry_details(record))
        return ApiResponse[GeometryResponse].created(_to_response(record), "Geometry created")

    async def update(
        self, record_id: int, payload: Optional[GeometryIn]
    ) -> ApiResponse[GeometryResponse]:
        """Partial update: blank name/wkt and type 0 keep the current values."""
        if payload is None:
            return _fail(ValidationError(MSG_PAYLOAD_REQUIRED))

        try:
            async with self.store.transaction() as tx:
                existing = await tx.get(record_id)
                if existing is None:
                    await tx.rollback()
                    return _fail(NotFoundError(MSG_NOT_FOUND))

                changed = await self._apply_update(tx, existing, payload)
                if not changed.ok:
                    await tx.rollback()
                    return _fail(changed.error)

                record = await tx.update(changed.value)
                await tx.commit()
        except StoreConflictError as e:
            return _fail(ConflictError(e.message))
        except StoreError as e:
            return self._store_failure("update", e)

        log_audit_event(
            "geometry_updated",
            details={
                **geometry_details(record),
                "previous_name": existing.name,
                "previous_wkt": existing.wkt,
            },
        )
        return ApiResponse[GeometryResponse].ok(_to_response(record), "Geometry updated")

    async def _apply_update(
        self,
        tx: StoreTransaction,
        existing: GeometryRecord,
        payload: GeometryIn,
    ) -> StepResult[GeometryRecord]:
        name = existing.name
        if not _blank(payload.name):
            name_error = validate_name(payload.name)
            if name_error:
                return StepResult.fail(name_error)
            name = payload.name.strip()

        gtype = existing.type
        if payload.type:
            gtype = GeometryType.from_code(payload.type)
            if gtype is None:
                return StepResult.fail(ValidationError(MSG_TYPE_RANGE))

        if name != existing.name:
            conflict = await ensure_unique_name(tx, name, exclude_id=existing.id)
            if conflict:
                return StepResult.fail(conflict)

        wkt, geometry = existing.wkt, existing.geometry
        if not _blank(payload.wkt):
            normalized = normalize_and_check_header(gtype, payload.wkt)
            if not normalized.ok:
                return StepResult.fail(normalized.error)
            checked = check_geometry(gtype, normalized.value, strict=self.strict_topology)
            if not checked.ok:
                return StepResult.fail(checked.error)
            wkt, geometry = normalized.value, checked.value
        elif gtype != existing.type:
            header_error = validate_header(gtype, existing.wkt)
            if header_error:
                return StepResult.fail(header_error)

        if (name, gtype, wkt) == (existing.name, existing.type, existing.wkt):
            return StepResult.fail(NoopError(MSG_NO_CHANGES))

        return StepResult.success(
            replace(existing, name=name, type=gtype, wkt=wkt, geometry=geometry)
        )

    async def delete(self, record_id: int) -> ApiResponse[bool]:
        try:
            async with self.store.transaction() as tx:
                existing = await tx.get(record_id)
                if existing is None:
                    await tx.rollback()
                    return _fail(NotFoundError(MSG_NOT_FOUND))
                await tx.delete(record_id)
                await tx.commit()
        except StoreError as e:
            return self._store_failure("delete", e)

        log_audit_event("geometry_deleted", details=geometry_details(existing))
        return ApiResponse[bool].ok(True, "Geometry deleted")

    async def add_range(
        self, items: Optional[Sequence[Optional[GeometryIn]]]
    ) -> ApiResponse[list[GeometryResponse]]:
        """Insert all items in one transaction, or none of them.

        Items are processed in order; the first failing item aborts the
        batch and its own error is reported, prefixed with its index.
        """
        if not items:
            return _fail(ValidationError(MSG_EMPTY_BATCH))

        created: list[GeometryRecord] = []
        guard = BatchNameGuard()
        try:
            async with self.store.transaction() as tx:
                for index, payload in enumerate(items):
                    staged = await self._stage(tx, guard, payload)
                    if not staged.ok:
                        await tx.rollback()
                        error = TransactionError(staged.error, index)
                        log_audit_event(
                            "geometry_batch_rolled_back",
                            details={
                                "requested": len(items),
                                "failed_index": index,
                                "reason": staged.error.message,
                            },
                            level=logging.WARNING,
                        )
                        return _fail(error)
                    created.append(staged.value)
                await tx.commit()
        except StoreConflictError as e:
            return _fail(ConflictError(e.message))
        except StoreError as e:
            return self._store_failure("batch", e)

        log_audit_event(
            "geometry_batch_added",
            details={"count": len(created), "ids": [r.id for r in created]},
        )
        return ApiResponse[list[GeometryResponse]].created(
            [_to_response(r) for r in created], "Batch added"
        )

    def _store_failure(self, operation: str, error: StoreError) -> ApiResponse:
        logger.error("Geometry store failure during %s: %s", operation, error.message)
        return _fail(error)
