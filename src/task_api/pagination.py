from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .models import MAX_SQLITE_INTEGER

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


def _parse_int(raw: Union[str, int, None]) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(raw.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class Page:
    """Bounded limit/offset window for a list query."""

    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0

    # PUBLIC_INTERFACE
    @classmethod
    def from_query(cls, limit: Union[str, int, None] = None, offset: Union[str, int, None] = None) -> "Page":
        """
        Build a page from raw query values.

        Missing or non-numeric values fall back to the defaults; numeric values
        are clamped so that 1 <= limit <= MAX_PAGE_SIZE and
        0 <= offset <= MAX_SQLITE_INTEGER.
        """
        parsed_limit = _parse_int(limit)
        parsed_offset = _parse_int(offset)
        if parsed_limit is None:
            parsed_limit = DEFAULT_PAGE_SIZE
        if parsed_offset is None:
            parsed_offset = 0
        return cls(
            limit=min(max(parsed_limit, 1), MAX_PAGE_SIZE),
            offset=min(max(parsed_offset, 0), MAX_SQLITE_INTEGER),
        )


# PUBLIC_INTERFACE
def pagination_envelope(
    items: Union[Sequence[Any], Iterable[Any]],
    total: int,
    page: Page,
) -> Dict[str, Any]:
    """
    Build the standard list envelope: ``{"data": [...], "meta": {total, limit, offset}}``.

    Args:
        items: The list/iterable of items for the current page.
        total: Number of items matching the same predicate as the page, ignoring limit/offset.
        page: The window that produced ``items``.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "data": materialized,
        "meta": {
            "total": int(total),
            "limit": page.limit,
            "offset": page.offset,
        },
    }
