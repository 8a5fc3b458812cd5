"""Structured audit events for geometry mutations.

Each event is a single JSON line on the ``geometry_api.audit`` logger, so
the audit trail can be routed separately from application logs.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

audit_logger = logging.getLogger("geometry_api.audit")


def _encode(value: Any) -> Any:
    """``json.dumps`` fallback for values it cannot encode natively."""
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def geometry_details(record: Any) -> dict[str, Any]:
    """Audit fields describing a stored geometry record."""
    return {
        "geometry_id": record.id,
        "name": record.name,
        # GeometryType members log by keyword, raw codes as-is
        "type": getattr(record.type, "name", record.type),
        "wkt": record.wkt,
    }


def log_audit_event(
    event_type: str,
    *,
    details: Mapping[str, Any] | None = None,
    level: int = logging.INFO,
) -> None:
    event: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event_type,
        "details": dict(details) if details else {},
    }
    audit_logger.log(level, json.dumps(event, ensure_ascii=True, default=_encode))
