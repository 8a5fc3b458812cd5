"""Model exports."""
from geometry_api.models.geometry import GeometryItem

__all__ = [
    "GeometryItem",
]
