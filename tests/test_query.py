"""Tests for the catalog query engine."""

import math

import pytest

from catalog.query import matches_filters, normalize_paging, query_entries, sort_entries
from catalog.types import SortKey
from tests.conftest import make_entry


def kbs(entries):
    return [entry.kb for entry in entries]


class TestFiltering:
    """Test case-insensitive conjunctive filtering."""

    def test_no_filters_returns_everything(self, sample_entries):
        page = query_entries(sample_entries, page_size=100)
        assert kbs(page.data) == kbs(sample_entries)

    def test_filter_is_case_insensitive_substring(self, sample_entries):
        page = query_entries(sample_entries, filters={"tag": "SEC"})
        assert kbs(page.data) == [100001, 100003]

    def test_filters_are_conjunctive(self, sample_entries):
        f1 = {"tag": "driver"}
        f2 = {"description": "secure"}

        both = kbs(query_entries(sample_entries, filters={**f1, **f2}).data)
        only_f1 = set(kbs(query_entries(sample_entries, filters=f1).data))
        only_f2 = set(kbs(query_entries(sample_entries, filters=f2).data))

        assert set(both) == only_f1 & only_f2
        assert both == [100004]

    def test_numeric_column_filters_on_string_form(self, sample_entries):
        page = query_entries(sample_entries, filters={"kb": "0003"})
        assert kbs(page.data) == [100003]

    def test_upload_time_filter(self, sample_entries):
        page = query_entries(sample_entries, filters={"uploadTime": "5000"})
        assert kbs(page.data) == [100005]

    def test_empty_pattern_is_ignored(self, sample_entries):
        page = query_entries(sample_entries, filters={"name": ""}, page_size=100)
        assert len(page.data) == len(sample_entries)

    def test_unknown_column_matches_nothing(self, sample_entries):
        assert not matches_filters(sample_entries[0], {"nonexistent": "x"})

    def test_missing_description_treated_as_empty(self):
        entry = make_entry(1, description="")
        assert not matches_filters(entry, {"description": "rollup"})


class TestSorting:
    """Test lexicographic multi-key sorting."""

    def test_single_key_descending(self, sample_entries):
        ordered = sort_entries(sample_entries, [SortKey("kb", "desc")])
        assert kbs(ordered) == [100005, 100004, 100003, 100002, 100001]

    def test_strings_compare_case_insensitively(self, sample_entries):
        ordered = sort_entries(sample_entries, [SortKey("name", "asc")])
        assert [entry.name for entry in ordered] == [
            "audio driver",
            "Bluetooth driver",
            "Cumulative Update",
            "Defender definitions",
            "servicing stack",
        ]

    def test_numbers_compare_numerically(self):
        entries = [
            make_entry(3, upload_time=100),
            make_entry(1, upload_time=20),
            make_entry(2, upload_time=3),
        ]
        ordered = sort_entries(entries, [SortKey("uploadTime", "asc")])
        assert kbs(ordered) == [2, 1, 3]

    def test_multi_key_groups_then_orders(self, sample_entries):
        ordered = sort_entries(sample_entries, [SortKey("tag", "asc"), SortKey("kb", "desc")])
        assert [(entry.tag.lower(), entry.kb) for entry in ordered] == [
            ("driver", 100005),
            ("driver", 100004),
            ("security-update", 100003),
            ("security-update", 100001),
            ("servicing", 100002),
        ]

    def test_ties_break_on_kb_ascending(self):
        entries = [make_entry(kb, tag="same") for kb in (5, 3, 9, 1)]
        ordered = sort_entries(entries, [SortKey("tag", "desc")])
        assert kbs(ordered) == [1, 3, 5, 9]

    def test_unknown_sort_column_does_not_raise(self, sample_entries):
        ordered = sort_entries(list(reversed(sample_entries)), [SortKey("bogus", "desc")])
        assert kbs(ordered) == kbs(sample_entries)

    def test_sort_is_deterministic(self, sample_entries):
        sorts = [SortKey("tag", "desc"), SortKey("name", "asc")]
        first = kbs(sort_entries(sample_entries, sorts))
        second = kbs(sort_entries(list(reversed(sample_entries)), sorts))
        assert first == second


class TestPagination:
    """Test page slicing and total page computation."""

    def test_concrete_scenario(self):
        entries = [
            make_entry(100001, name="A", tag="x", upload_time=1000),
            make_entry(100002, name="B", tag="y", upload_time=2000),
        ]
        page = query_entries(entries, {}, [SortKey("kb", "desc")], 1, 1)
        assert kbs(page.data) == [100002]
        assert page.total_pages == 2

    @pytest.mark.parametrize("page_size", [1, 2, 3, 5, 7])
    def test_page_size_and_total_pages(self, sample_entries, page_size):
        page = query_entries(sample_entries, page=1, page_size=page_size)
        assert len(page.data) <= page_size
        assert page.total_pages == math.ceil(len(sample_entries) / page_size)

    def test_pages_cover_collection_once(self, sample_entries):
        seen = []
        for number in range(1, 4):
            seen.extend(kbs(query_entries(sample_entries, page=number, page_size=2).data))
        assert seen == kbs(sample_entries)

    def test_empty_collection_has_zero_pages(self):
        page = query_entries([], page=1, page_size=10)
        assert page.data == []
        assert page.total_pages == 0

    def test_no_matches_has_zero_pages(self, sample_entries):
        page = query_entries(sample_entries, filters={"name": "does-not-exist"})
        assert page.total_pages == 0
        assert page.data == []

    def test_out_of_range_page_is_empty(self, sample_entries):
        page = query_entries(sample_entries, page=10, page_size=2)
        assert page.data == []
        assert page.total_pages == 3

    @pytest.mark.parametrize("page, page_size", [(None, None), (0, 0), (-3, -1)])
    def test_non_positive_paging_uses_defaults(self, page, page_size):
        assert normalize_paging(page, page_size) == (1, 10)
