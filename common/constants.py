"""Project-wide constants (e.g., starting KB number, paging defaults)."""

FIRST_KB_NUMBER: int = 100001

DEFAULT_PAGE: int = 1
DEFAULT_PAGE_SIZE: int = 10

MAX_SORT_KEYS: int = 10  # sort0..sort9 in the list query string

SORT_ASCENDING = "asc"
SORT_DESCENDING = "desc"
