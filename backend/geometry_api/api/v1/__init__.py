"""API v1 router aggregation."""
from fastapi import APIRouter

from geometry_api.api.v1.geometries import router as geometries_router

router = APIRouter()

router.include_router(geometries_router)
