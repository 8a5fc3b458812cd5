"""Tests for audit event logging."""

import json
import logging

from geometry_api.services.geometry_types import GeometryType
from geometry_api.services.store_base import GeometryRecord
from geometry_api.utils.audit import geometry_details, log_audit_event


def test_geometry_details_uses_type_keyword() -> None:
    record = GeometryRecord(id=3, name="Lake A", type=GeometryType.POLYGON, wkt="POLYGON ((0 0, 0 1, 1 1, 0 0))")
    assert geometry_details(record) == {
        "geometry_id": 3,
        "name": "Lake A",
        "type": "POLYGON",
        "wkt": "POLYGON ((0 0, 0 1, 1 1, 0 0))",
    }


def test_event_is_one_json_line(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="geometry_api.audit"):
        log_audit_event("geometry_batch_added", details={"ids": {2, 1}, "count": 2})

    event = json.loads(caplog.records[-1].getMessage())
    assert event["event"] == "geometry_batch_added"
    assert event["details"] == {"ids": [1, 2], "count": 2}
    assert "ts" in event


def test_event_level(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="geometry_api.audit"):
        log_audit_event("geometry_batch_rolled_back", level=logging.WARNING)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert json.loads(record.getMessage())["details"] == {}
