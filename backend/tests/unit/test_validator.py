"""Tests for geometry_api.services.validator."""

import pytest

from geometry_api.schemas.geometry import GeometryIn
from geometry_api.services.errors import ValidationError
from geometry_api.services.geometry_types import GeometryType
from geometry_api.services.validator import (
    MSG_NAME_PATTERN,
    MSG_NAME_REQUIRED,
    MSG_PAYLOAD_REQUIRED,
    MSG_TYPE_RANGE,
    MSG_WKT_REQUIRED,
    validate_fields,
    validate_header,
    validate_name,
)


def _error_message(payload) -> str:
    result = validate_fields(payload)
    assert not result.ok
    assert isinstance(result.error, ValidationError)
    assert result.error.status_code == 400
    return result.error.message


class TestValidateFields:
    def test_valid_point_is_normalized(self) -> None:
        result = validate_fields(GeometryIn(name="Lake A", type=1, wkt="30 10"))
        assert result.ok
        assert result.value == "POINT (30 10)"

    def test_missing_payload(self) -> None:
        assert _error_message(None) == MSG_PAYLOAD_REQUIRED

    def test_blank_name(self) -> None:
        assert _error_message(GeometryIn(name="   ", type=1, wkt="1 2")) == MSG_NAME_REQUIRED

    def test_missing_wkt(self) -> None:
        assert _error_message(GeometryIn(name="Lake A", type=1)) == MSG_WKT_REQUIRED

    def test_type_out_of_range(self) -> None:
        assert _error_message(GeometryIn(name="Lake A", type=4, wkt="1 2")) == MSG_TYPE_RANGE

    def test_missing_type_is_out_of_range(self) -> None:
        assert _error_message(GeometryIn(name="Lake A", wkt="1 2")) == MSG_TYPE_RANGE

    def test_name_pattern_is_checked_before_type(self) -> None:
        assert _error_message(GeometryIn(name="ab", type=9, wkt="1 2")) == MSG_NAME_PATTERN

    def test_required_fields_are_checked_first(self) -> None:
        assert _error_message(GeometryIn(name="", type=9, wkt="")) == MSG_NAME_REQUIRED

    def test_header_mismatch(self) -> None:
        payload = GeometryIn(name="Lake A", type=1, wkt="LINESTRING (1 2, 3 4)")
        assert _error_message(payload) == "WKT must start with POINT."

    def test_topology_is_not_checked_here(self) -> None:
        result = validate_fields(
            GeometryIn(name="Open Ring", type=3, wkt="POLYGON((0 0,0 5,5 5,5 0))")
        )
        assert result.ok


class TestValidateName:
    @pytest.mark.parametrize("name", ["abc", "Lake A", "river_1-north", "x" * 50, "  abc  "])
    def test_accepts(self, name: str) -> None:
        assert validate_name(name) is None

    @pytest.mark.parametrize("name", ["ab", "x" * 51, "Lake#1", "gölü", "  ab  "])
    def test_rejects(self, name: str) -> None:
        error = validate_name(name)
        assert isinstance(error, ValidationError)
        assert error.message == MSG_NAME_PATTERN


class TestValidateHeader:
    def test_case_insensitive_keyword(self) -> None:
        assert validate_header(GeometryType.POINT, "point (1 2)") is None

    def test_mismatch(self) -> None:
        error = validate_header(GeometryType.POLYGON, "LINESTRING (1 2, 3 4)")
        assert error.message == "WKT must start with POLYGON."
