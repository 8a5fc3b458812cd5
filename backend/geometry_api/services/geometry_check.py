"""Geometry parsing and structural checks.

Shapely (GEOS) does the actual parsing. The minimum-point and ring-closure
checks are also done here on the coordinate text itself, so the reported
reason is the same whichever GEOS version is installed and an unclosed ring
never surfaces as a generic reader error.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

import shapely
import shapely.wkt
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry
from shapely.validation import explain_validity

from geometry_api.services.errors import GeometryError, StepResult
from geometry_api.services.geometry_types import SHAPELY_TYPES, GeometryType

logger = logging.getLogger(__name__)

SRID = 4326
MIN_LINESTRING_POINTS = 2
MIN_RING_POINTS = 4

MSG_LINESTRING_POINTS = "LineString must contain at least 2 points."
MSG_POLYGON_POINTS = "Polygon must contain at least 4 points."
MSG_RING_NOT_CLOSED = "Polygon ring is not closed (first and last points differ)."

_COORDINATE_GROUP = re.compile(r"\(([^()]*)\)")


@dataclass(frozen=True)
class GeometryParseResult:
    geometry: Optional[BaseGeometry]
    ok: bool
    reason: Optional[str] = None


def parse_geometry(text: str) -> GeometryParseResult:
    """Parse WKT with Shapely and tag the result with SRID 4326."""
    try:
        geometry = shapely.wkt.loads(text)
    except (GEOSException, ValueError) as e:
        return GeometryParseResult(None, False, f"Invalid WKT: {e}")
    return GeometryParseResult(shapely.set_srid(geometry, SRID), True)


def _coordinate_groups(text: str) -> list[list[tuple[float, float]]]:
    """Split WKT into its innermost parenthesized coordinate lists.

    Raises ValueError on anything that is not a list of 2-D numeric pairs.
    """
    groups = []
    for body in _COORDINATE_GROUP.findall(text):
        pairs = []
        for part in body.split(","):
            tokens = part.split()
            if len(tokens) != 2:
                raise ValueError(f"malformed coordinate '{part.strip()}'")
            pairs.append((float(tokens[0]), float(tokens[1])))
        groups.append(pairs)
    if not groups:
        raise ValueError("no coordinates found")
    return groups


def check_structure(gtype: GeometryType, text: str) -> Optional[GeometryError]:
    """Point-count and ring-closure checks on canonical text."""
    try:
        groups = _coordinate_groups(text)
    except ValueError as e:
        return GeometryError(f"Invalid WKT: {e}")

    if gtype is GeometryType.LINESTRING:
        if len(groups[0]) < MIN_LINESTRING_POINTS:
            return GeometryError(MSG_LINESTRING_POINTS)
    elif gtype is GeometryType.POLYGON:
        for ring in groups:
            if len(ring) < MIN_RING_POINTS:
                return GeometryError(MSG_POLYGON_POINTS)
            if ring[0] != ring[-1]:
                return GeometryError(MSG_RING_NOT_CLOSED)
    return None


def check_geometry(
    gtype: GeometryType, text: str, strict: bool = True
) -> StepResult[BaseGeometry]:
    """Run structural checks, parse, and return a geometry with SRID 4326.

    With ``strict`` the parsed geometry must also satisfy GEOS validity
    (e.g. no self-intersecting polygon rings).
    """
    error = check_structure(gtype, text)
    if error:
        return StepResult.fail(error)

    parsed = parse_geometry(text)
    if not parsed.ok:
        logger.debug("Shapely rejected %r: %s", text, parsed.reason)
        return StepResult.fail(GeometryError(parsed.reason))

    geometry = parsed.geometry
    if geometry.geom_type != SHAPELY_TYPES[gtype]:
        return StepResult.fail(GeometryError(f"Invalid WKT: expected {gtype.keyword}."))

    if strict and not geometry.is_valid:
        return StepResult.fail(
            GeometryError(f"Geometry is not valid: {explain_validity(geometry)}")
        )

    return StepResult.success(geometry)
