"""Tests for list parameter normalisation."""

import pytest

from mastercrud.query.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    Pagination,
    search_pattern,
    total_pages,
)


class TestPaginationFromParams:
    def test_defaults(self):
        p = Pagination.from_params()
        assert (p.page, p.limit, p.offset) == (1, 10, 0)

    def test_numeric_strings(self):
        p = Pagination.from_params("3", "25")
        assert (p.page, p.limit, p.offset) == (3, 25, 50)

    @pytest.mark.parametrize("raw", ["0", "-2", "abc", "", "1.5"])
    def test_bad_page_falls_back_to_first(self, raw):
        assert Pagination.from_params(page=raw).page == 1

    @pytest.mark.parametrize("raw", ["0", "-1", "ten", ""])
    def test_bad_limit_falls_back_to_default(self, raw):
        assert Pagination.from_params(limit=raw).limit == DEFAULT_LIMIT

    def test_limit_is_clamped(self):
        assert Pagination.from_params(limit="500").limit == MAX_LIMIT
        assert Pagination.from_params(limit=MAX_LIMIT).limit == MAX_LIMIT

    def test_page_beyond_data_is_kept(self):
        assert Pagination.from_params(page="999").offset == 998 * 10


class TestTotalPages:
    @pytest.mark.parametrize(
        "total,limit,expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (23, 5, 5)],
    )
    def test_ceiling(self, total, limit, expected):
        assert total_pages(total, limit) == expected


class TestSearchPattern:
    def test_wraps_term(self):
        assert search_pattern("ali") == "%ali%"

    def test_blank_is_no_filter(self):
        assert search_pattern(None) is None
        assert search_pattern("") is None
        assert search_pattern("   ") is None

    def test_wildcards_are_escaped(self):
        assert search_pattern("50%_off") == "%50\\%\\_off%"
        assert search_pattern("a\\b") == "%a\\\\b%"
