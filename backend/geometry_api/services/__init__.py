"""Services exports."""
from geometry_api.services.geometry_service import GeometryService
from geometry_api.services.store import create_store
from geometry_api.services.store_base import GeometryRecord, GeometryStore

__all__ = [
    "GeometryRecord",
    "GeometryService",
    "GeometryStore",
    "create_store",
]
