"""Field validation for geometry payloads.

Checks run in a fixed order so a malformed payload always produces the
same message: required fields, name pattern, type code, then the
header of the normalized text against the declared type. Topology is
left to geometry_check.
"""
import re
from typing import Optional

from geometry_api.schemas.geometry import GeometryIn
from geometry_api.services.errors import StepResult, ValidationError
from geometry_api.services.geometry_types import GeometryType, detect_keyword
from geometry_api.services.normalizer import normalize_wkt

NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _\-]{3,50}$")

MSG_PAYLOAD_REQUIRED = "Payload is required."
MSG_NAME_REQUIRED = "Name is required."
MSG_WKT_REQUIRED = "WKT is required."
MSG_TYPE_RANGE = "Type must be 1=POINT, 2=LINESTRING, 3=POLYGON."
MSG_NAME_PATTERN = (
    "Name must be 3-50 characters of letters, digits, spaces, underscores or hyphens."
)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_name(name: str) -> Optional[ValidationError]:
    """Check the trimmed name against the naming pattern."""
    if not NAME_PATTERN.match(name.strip()):
        return ValidationError(MSG_NAME_PATTERN)
    return None


def validate_header(gtype: GeometryType, wkt: str) -> Optional[ValidationError]:
    """Check that normalized text starts with the keyword of its type."""
    if detect_keyword(wkt) != gtype.keyword:
        return ValidationError(f"WKT must start with {gtype.keyword}.")
    return None


def normalize_and_check_header(gtype: GeometryType, raw: str) -> StepResult[str]:
    """Normalize raw text for a known type and verify its header."""
    normalized = normalize_wkt(gtype, raw)
    error = validate_header(gtype, normalized)
    if error:
        return StepResult.fail(error)
    return StepResult.success(normalized)


def validate_fields(payload: Optional[GeometryIn]) -> StepResult[str]:
    """Validate a full payload and return its normalized WKT."""
    if payload is None:
        return StepResult.fail(ValidationError(MSG_PAYLOAD_REQUIRED))
    if _blank(payload.name):
        return StepResult.fail(ValidationError(MSG_NAME_REQUIRED))
    if _blank(payload.wkt):
        return StepResult.fail(ValidationError(MSG_WKT_REQUIRED))

    name_error = validate_name(payload.name)
    if name_error:
        return StepResult.fail(name_error)

    gtype = GeometryType.from_code(payload.type)
    if gtype is None:
        return StepResult.fail(ValidationError(MSG_TYPE_RANGE))

    return normalize_and_check_header(gtype, payload.wkt)
