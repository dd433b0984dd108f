"""Utility helper functions for the catalog."""

import time
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any, Iterable, List, Mapping, Optional

from common.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_SORT_KEYS,
    SORT_ASCENDING,
    SORT_DESCENDING,
)
from catalog.types import ListQuery, SortKey

FILTER_PREFIX = "filter_"
TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.
    """
    return datetime.now(timezone.utc).isoformat()


def current_time_millis() -> int:
    return int(time.time() * 1000)


def parse_int(value: Any, default: Optional[int]) -> Optional[int]:
    """
    Coerce a loosely-typed value to int, falling back to default.

    Args:
        value: Raw value (query string, JSON field, ...)
        default: Value returned when coercion fails

    Returns:
        Parsed integer or default
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_flag(value: Any, default: bool = False) -> bool:
    """
    Coerce a JSON or form value to a strict boolean.

    Booleans pass through, numbers are true when non-zero and strings are
    true only for "true", "1", "yes" or "on" (case-insensitive). A missing
    value yields default; any other type is false.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return False


def parse_direction(value: Optional[str]) -> str:
    if value and value.strip().lower() == SORT_DESCENDING:
        return SORT_DESCENDING
    return SORT_ASCENDING


def parse_list_query(params: Mapping[str, str]) -> ListQuery:
    """
    Parse the list endpoint query string.

    Recognized keys:
        - page, limit: paging, coerced to defaults when malformed or non-positive
        - filter_<column>: substring filter, ignored when empty
        - sort0..sort9 / dir0..dir9: sort keys in priority order

    Args:
        params: Query parameters (any mapping, e.g. Starlette QueryParams)

    Returns:
        ListQuery ready for the query engine
    """
    filters = {
        key[len(FILTER_PREFIX):]: value
        for key, value in params.items()
        if key.startswith(FILTER_PREFIX) and value
    }

    sorts: List[SortKey] = []
    for index in range(MAX_SORT_KEYS):
        column = params.get(f"sort{index}")
        if column:
            sorts.append(SortKey(column=column, direction=parse_direction(params.get(f"dir{index}"))))

    page = parse_int(params.get("page"), DEFAULT_PAGE)
    page_size = parse_int(params.get("limit"), DEFAULT_PAGE_SIZE)

    return ListQuery(
        filters=filters,
        sorts=sorts,
        page=page if page > 0 else DEFAULT_PAGE,
        page_size=page_size if page_size > 0 else DEFAULT_PAGE_SIZE,
    )


def parse_kb_list(values: Iterable[Any]) -> List[int]:
    """
    Keep the values that coerce to an integer KB number, dropping the rest.
    """
    parsed = []
    for value in values:
        kb = parse_int(value, None)
        if kb is not None:
            parsed.append(kb)
    return parsed


def make_stored_file_name(original_file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build a collision-resistant storage name: <epoch-ms>-<basename>.

    Directory components of the client-supplied name are discarded.
    """
    if timestamp_ms is None:
        timestamp_ms = current_time_millis()
    base_name = PurePath(original_file_name.replace("\\", "/")).name or "upload"
    return f"{timestamp_ms}-{base_name}"
