"""Paged, filtered listing."""
import math
from typing import Optional

from geometry_api.services.errors import StepResult, ValidationError
from geometry_api.services.store_base import GeometryRecord, StoreTransaction

MSG_PAGE_RANGE = "Page must be 1 or greater."
MSG_PAGE_SIZE_RANGE = "Page size must be greater than 0."


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if total_count else 0


def validate_page_request(
    page: int, page_size: int, max_page_size: Optional[int] = None
) -> Optional[ValidationError]:
    if page < 1:
        return ValidationError(MSG_PAGE_RANGE)
    if page_size < 1:
        return ValidationError(MSG_PAGE_SIZE_RANGE)
    if max_page_size is not None and page_size > max_page_size:
        return ValidationError(f"Page size must be at most {max_page_size}.")
    return None


async def fetch_page(
    tx: StoreTransaction,
    page: int,
    page_size: int,
    search: Optional[str] = None,
) -> StepResult[tuple[list[GeometryRecord], int, int]]:
    """Filter, count, then slice.

    Returns (items, total_count, total_pages). A page past the end yields
    an empty item list, not an error.
    """
    error = validate_page_request(page, page_size)
    if error:
        return StepResult.fail(error)

    search = search.strip() if search else None
    total_count = await tx.count(search)
    offset = (page - 1) * page_size
    items = await tx.fetch(offset, page_size, search) if offset < total_count else []
    return StepResult.success((items, total_count, total_pages(total_count, page_size)))
