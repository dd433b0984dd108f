"""
Catalog query engine.

Filters, sorts and paginates a snapshot of metadata entries. Every call
works on the full collection it is handed; nothing is cached or indexed
between calls.
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from common.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from common.logging_config import get_logger
from catalog.types import CatalogPage, MetadataEntry, SortKey

logger = get_logger(__name__)


def _field_text(entry: MetadataEntry, column: str) -> str:
    value = entry.column_value(column)
    if value is None:
        return ""
    return str(value)


def matches_filters(entry: MetadataEntry, filters: Dict[str, str]) -> bool:
    """
    Check an entry against every active filter (case-insensitive substring, AND).
    """
    for column, pattern in filters.items():
        if not pattern:
            continue
        if pattern.lower() not in _field_text(entry, column).lower():
            return False
    return True


def sort_value(entry: MetadataEntry, column: str) -> Tuple[int, Any]:
    """
    Build a comparable key for one column.

    Absent values rank first, then numbers, then case-folded strings, so
    mixed or missing columns still produce a total order.
    """
    value = entry.column_value(column)
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value).lower())


def sort_entries(entries: Iterable[MetadataEntry], sorts: Sequence[SortKey]) -> List[MetadataEntry]:
    """
    Lexicographic multi-key sort, with ascending kb as the final tiebreaker.
    """
    # kb first, then each key from least to most significant; sorts are stable
    ordered = sorted(entries, key=lambda entry: entry.kb)
    for sort_key in reversed(sorts):
        ordered.sort(
            key=lambda entry, column=sort_key.column: sort_value(entry, column),
            reverse=sort_key.descending,
        )
    return ordered


def normalize_paging(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int]:
    if not page or page < 1:
        page = DEFAULT_PAGE
    if not page_size or page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


def query_entries(
    entries: Iterable[MetadataEntry],
    filters: Optional[Dict[str, str]] = None,
    sorts: Optional[Sequence[SortKey]] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> CatalogPage:
    """
    Filter, sort and paginate a collection of metadata entries.

    Args:
        entries: Full snapshot of the catalog
        filters: Column name -> case-insensitive substring pattern
        sorts: Ordered sort keys, most significant first
        page: 1-indexed page number (defaults to 1)
        page_size: Entries per page (defaults to 10)

    Returns:
        CatalogPage with at most page_size entries and the total page count
        (0 when nothing matches)
    """
    filters = filters or {}
    sorts = sorts or []
    page, page_size = normalize_paging(page, page_size)

    filtered = [entry for entry in entries if matches_filters(entry, filters)]
    if sorts:
        filtered = sort_entries(filtered, sorts)

    total_pages = math.ceil(len(filtered) / page_size)
    start = (page - 1) * page_size
    data = filtered[start:start + page_size]

    logger.debug(
        f"Query matched {len(filtered)} entries, returning page {page}/{total_pages} "
        f"[filters={sorted(filters)}] [sorts={[(s.column, s.direction) for s in sorts]}]"
    )

    return CatalogPage(data=data, total_pages=total_pages)
