"""Supported geometry types."""
from enum import IntEnum
from typing import Optional


class GeometryType(IntEnum):
    """Geometry type codes used in payloads and the ``type`` column."""

    POINT = 1
    LINESTRING = 2
    POLYGON = 3

    @property
    def keyword(self) -> str:
        return keyword_for(self)

    @classmethod
    def from_code(cls, code) -> Optional["GeometryType"]:
        """Return the type for a payload code, or None if it is not 1, 2 or 3."""
        if isinstance(code, bool):
            return None
        try:
            return cls(code)
        except (ValueError, TypeError):
            return None


_KEYWORDS = {
    GeometryType.POINT: "POINT",
    GeometryType.LINESTRING: "LINESTRING",
    GeometryType.POLYGON: "POLYGON",
}

# Shapely geom_type names for each type
SHAPELY_TYPES = {
    GeometryType.POINT: "Point",
    GeometryType.LINESTRING: "LineString",
    GeometryType.POLYGON: "Polygon",
}

KEYWORDS = tuple(_KEYWORDS.values())


def keyword_for(gtype: GeometryType) -> str:
    """WKT header keyword for a geometry type."""
    return _KEYWORDS[gtype]


def detect_keyword(text: str) -> Optional[str]:
    """Return the WKT keyword the text starts with (case-insensitive), if any."""
    upper = text.lstrip().upper()
    for keyword in KEYWORDS:
        if upper.startswith(keyword):
            return keyword
    return None
