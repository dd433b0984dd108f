"""Tests for request parsing helpers."""

import pytest

from catalog.types import SortKey
from catalog.utils import make_stored_file_name, parse_flag, parse_int, parse_kb_list, parse_list_query


class TestParseInt:
    @pytest.mark.parametrize("value, expected", [
        ("3", 3),
        (" 12 ", 12),
        (7, 7),
        ("abc", 5),
        ("", 5),
        (None, 5),
        ("2.5", 5),
        (True, 5),
    ])
    def test_coerces_or_falls_back(self, value, expected):
        assert parse_int(value, 5) == expected

    def test_none_default_marks_malformed(self):
        assert parse_int("abc", None) is None
        assert parse_int("-4", None) == -4


class TestParseFlag:
    @pytest.mark.parametrize("value, expected", [
        (True, True),
        (False, False),
        ("true", True),
        (" YES ", True),
        ("on", True),
        ("1", True),
        ("false", False),
        ("0", False),
        ("nonsense", False),
        ("", False),
        (1, True),
        (0, False),
        ([1], False),
    ])
    def test_coerces_strictly(self, value, expected):
        assert parse_flag(value) is expected

    def test_missing_uses_default(self):
        assert parse_flag(None) is False
        assert parse_flag(None, True) is True


class TestParseListQuery:
    def test_defaults(self):
        query = parse_list_query({})
        assert query.page == 1
        assert query.page_size == 10
        assert query.filters == {}
        assert query.sorts == []

    def test_paging_parameters(self):
        query = parse_list_query({"page": "3", "limit": "25"})
        assert query.page == 3
        assert query.page_size == 25

    @pytest.mark.parametrize("page, limit", [("0", "0"), ("-1", "-5"), ("x", "y")])
    def test_malformed_paging_is_coerced(self, page, limit):
        query = parse_list_query({"page": page, "limit": limit})
        assert query.page == 1
        assert query.page_size == 10

    def test_filters_strip_prefix_and_skip_empty(self):
        query = parse_list_query({
            "filter_tag": "sec",
            "filter_name": "",
            "filter_originalFileName": "KB5",
            "unrelated": "x",
        })
        assert query.filters == {"tag": "sec", "originalFileName": "KB5"}

    def test_sorts_keep_priority_order(self):
        query = parse_list_query({
            "sort1": "kb",
            "dir1": "desc",
            "sort0": "tag",
        })
        assert query.sorts == [SortKey("tag", "asc"), SortKey("kb", "desc")]

    def test_unknown_direction_is_ascending(self):
        query = parse_list_query({"sort0": "name", "dir0": "sideways"})
        assert query.sorts == [SortKey("name", "asc")]

    def test_direction_is_case_insensitive(self):
        query = parse_list_query({"sort0": "name", "dir0": "DESC"})
        assert query.sorts[0].descending

    def test_only_ten_sort_keys(self):
        params = {f"sort{i}": "kb" for i in range(12)}
        assert len(parse_list_query(params).sorts) == 10


class TestStoredFileName:
    def test_prefixes_timestamp(self):
        assert make_stored_file_name("windows10.0-kb5031356.msu", 1700000000000) == (
            "1700000000000-windows10.0-kb5031356.msu"
        )

    def test_strips_directories(self):
        assert make_stored_file_name("../../etc/passwd", 1) == "1-passwd"
        assert make_stored_file_name("C:\\temp\\patch.cab", 1) == "1-patch.cab"

    def test_empty_name_gets_placeholder(self):
        assert make_stored_file_name("", 1) == "1-upload"


def test_parse_kb_list_drops_malformed_values():
    assert parse_kb_list(["100001", 100002, "abc", None, "-4"]) == [100001, 100002, -4]
