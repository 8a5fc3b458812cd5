"""Repair loosely formatted coordinate text into canonical WKT.

Handles two kinds of sloppy input:

- a missing type header, e.g. ``"30 10"`` for a point, which gets the
  keyword of the declared type;
- missing separators between coordinate pairs, e.g.
  ``"LINESTRING (30 10 10 30)"``, which is re-tokenized into
  ``"LINESTRING (30 10, 10 30)"``.

Separator repair is a best-effort recovery for space-delimited coordinate
lists. It is not a WKT parser: numbers are paired in the order they appear
and a trailing unpaired number is dropped. Polygon rings are never closed
here; closure is checked later by the geometry check.
"""
import re

from geometry_api.services.geometry_types import GeometryType, detect_keyword

_SRID_PREFIX = re.compile(r"^\s*SRID\s*=\s*\d+\s*;\s*", re.IGNORECASE)
_NUMBER = re.compile(r"[+-]?\d+(?:\.\d+)?")
_LINESTRING_BODY = re.compile(r"LINESTRING\s*\(\s*([^)]+?)\s*\)\s*$", re.IGNORECASE)
_POLYGON_BODY = re.compile(r"POLYGON\s*\(\s*\(\s*([^)]+?)\s*\)\s*\)\s*$", re.IGNORECASE)


def tokenize_pairs(body: str) -> list[str]:
    """Scan numeric tokens left to right and pair them as ``"x y"``."""
    numbers = _NUMBER.findall(body)
    return [f"{numbers[i]} {numbers[i + 1]}" for i in range(0, len(numbers) - 1, 2)]


def _linestring(body: str) -> str:
    return f"LINESTRING ({', '.join(tokenize_pairs(body))})"


def _polygon(body: str) -> str:
    return f"POLYGON (({', '.join(tokenize_pairs(body))}))"


def _needs_separators(body: str | None) -> bool:
    return bool(body and body.strip()) and "," not in body


def normalize_wkt(gtype: int, raw: str) -> str:
    """Return canonical WKT for raw text declared as ``gtype``.

    Text that already carries a keyword and separators is returned
    unchanged (apart from trimming), so normalizing canonical text is a
    no-op. Unknown type codes return the trimmed text untouched.
    """
    text = _SRID_PREFIX.sub("", raw.strip(), count=1).strip()
    keyword = detect_keyword(text)

    if keyword == "LINESTRING":
        match = _LINESTRING_BODY.search(text)
        body = match.group(1) if match else None
        return _linestring(body) if _needs_separators(body) else text
    if keyword == "POLYGON":
        match = _POLYGON_BODY.search(text)
        body = match.group(1) if match else None
        return _polygon(body) if _needs_separators(body) else text
    if keyword == "POINT":
        return text

    declared = GeometryType.from_code(gtype)
    if declared is GeometryType.POINT:
        return f"POINT {text}" if text.startswith("(") else f"POINT ({text})"
    if declared is GeometryType.LINESTRING:
        return _linestring(text)
    if declared is GeometryType.POLYGON:
        return _polygon(text.strip(" \t()"))
    return text
