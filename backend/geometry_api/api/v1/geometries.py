"""Geometry API endpoints.

Thin routing layer: every handler delegates to GeometryService and sends
the envelope back with its statusCode as the HTTP status.
"""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse

from geometry_api.schemas.geometry import ApiResponse, GeometryIn
from geometry_api.services.geometry_service import GeometryService

router = APIRouter(prefix="/geometries", tags=["Geometries"])


def get_geometry_service(request: Request) -> GeometryService:
    """Build a service around the store owned by the running application."""
    settings = request.app.state.settings
    return GeometryService(
        request.app.state.geometry_store,
        strict_topology=settings.STRICT_TOPOLOGY,
        max_page_size=settings.MAX_PAGE_SIZE,
    )


def _respond(result: ApiResponse) -> JSONResponse:
    return JSONResponse(
        status_code=result.status_code,
        content=result.model_dump(mode="json", by_alias=True),
    )


@router.get("")
async def list_geometries(service: GeometryService = Depends(get_geometry_service)):
    """List all geometries ordered by id."""
    return _respond(await service.get_all())


@router.get("/paged")
async def list_geometries_paged(
    request: Request,
    page: int = Query(1),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    search: Optional[str] = None,
    service: GeometryService = Depends(get_geometry_service),
):
    """
    Page through geometries.

    ``search`` is a case-insensitive substring match on the name. Pages past
    the last one return an empty item list.
    """
    if page_size is None:
        page_size = request.app.state.settings.DEFAULT_PAGE_SIZE
    return _respond(await service.get_paged(page, page_size, search))


@router.get("/{geometry_id}")
async def get_geometry(
    geometry_id: int,
    service: GeometryService = Depends(get_geometry_service),
):
    """Get a geometry by id."""
    return _respond(await service.get_by_id(geometry_id))


@router.post("")
async def create_geometry(
    data: Optional[GeometryIn] = Body(None),
    service: GeometryService = Depends(get_geometry_service),
):
    """Create a geometry. Missing type headers and coordinate commas are repaired."""
    return _respond(await service.create(data))


@router.put("/{geometry_id}")
async def update_geometry(
    geometry_id: int,
    data: Optional[GeometryIn] = Body(None),
    service: GeometryService = Depends(get_geometry_service),
):
    """Partially update a geometry's name, type and/or WKT."""
    return _respond(await service.update(geometry_id, data))


@router.delete("/{geometry_id}")
async def delete_geometry(
    geometry_id: int,
    service: GeometryService = Depends(get_geometry_service),
):
    """Delete a geometry."""
    return _respond(await service.delete(geometry_id))


@router.post("/batch")
async def add_geometries(
    items: Optional[List[Optional[GeometryIn]]] = Body(None),
    service: GeometryService = Depends(get_geometry_service),
):
    """Insert several geometries atomically: all are stored or none."""
    return _respond(await service.add_range(items))
