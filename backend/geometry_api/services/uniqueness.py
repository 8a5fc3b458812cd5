"""Case-insensitive name uniqueness checks."""
from typing import Optional

from geometry_api.services.errors import ConflictError
from geometry_api.services.store_base import StoreTransaction


def name_key(name: str) -> str:
    """Comparison key for names: trimmed and lower-cased."""
    return name.strip().lower()


async def ensure_unique_name(
    tx: StoreTransaction, name: str, exclude_id: Optional[int] = None
) -> Optional[ConflictError]:
    """Return a ConflictError if another record already uses ``name``.

    ``exclude_id`` skips the record being updated.
    """
    if await tx.name_taken(name, exclude_id=exclude_id):
        return ConflictError(f"A geometry named '{name.strip()}' already exists.")
    return None


class BatchNameGuard:
    """Tracks names accepted so far in a batch.

    Items are checked in input order, so the reported conflict is always
    the first duplicate, whether it collides with the store or with an
    earlier item of the same batch.
    """

    def __init__(self):
        self._seen: set[str] = set()

    async def check(self, tx: StoreTransaction, name: str) -> Optional[ConflictError]:
        key = name_key(name)
        if key in self._seen or await tx.name_taken(name):
            return ConflictError(f"Duplicate name: {name.strip()}")
        self._seen.add(key)
        return None
