"""Tests for the parameter normalizer."""

from __future__ import annotations

import pytest

from mongo_list_query.config import ListQueryConfig
from mongo_list_query.exceptions import FilterParseError, PaginationError
from mongo_list_query.params import normalize, parse_int


def test_defaults() -> None:
    p = normalize({})
    assert p.page == 1
    assert p.limit == 20
    assert p.skip == 0
    assert p.sort == "-createdAt"
    assert p.q == ""
    assert p.fields == ()


def test_skip_computed_from_page_and_limit() -> None:
    p = normalize({"page": "3", "limit": "10"})
    assert (p.page, p.limit, p.skip) == (3, 10, 20)


def test_explicit_skip_overrides_page() -> None:
    p = normalize({"page": "3", "limit": "10", "skip": "5"})
    assert p.page == 3
    assert p.skip == 5


def test_explicit_zero_skip_is_honoured() -> None:
    assert normalize({"page": "4", "skip": "0"}).skip == 0


def test_non_numeric_values_fall_back() -> None:
    p = normalize({"page": "abc", "limit": "", "skip": "x"})
    assert (p.page, p.limit, p.skip) == (1, 20, 0)


def test_leading_integer_is_read() -> None:
    assert parse_int("10abc") == 10
    assert parse_int(" 7") == 7
    assert parse_int("abc") is None
    assert parse_int(None) is None
    assert parse_int(True) is None


@pytest.mark.parametrize("limit", ["0", "-5"])
def test_non_positive_limit_rejected(limit: str) -> None:
    with pytest.raises(PaginationError) as exc:
        normalize({"limit": limit})
    assert exc.value.param == "limit"
    assert exc.value.errors == {"limit": ["limit must be > 0"]}


@pytest.mark.parametrize("page", ["0", "-3"])
def test_page_below_one_falls_back_to_default(page: str) -> None:
    p = normalize({"page": page, "limit": "10"})
    assert (p.page, p.skip) == (1, 0)


def test_leading_zeros_are_ignored() -> None:
    assert parse_int("0" * 5000 + "42") == 42


@pytest.mark.parametrize("key", ["page", "limit", "skip"])
def test_oversized_numbers_rejected(key: str) -> None:
    with pytest.raises(PaginationError) as exc:
        normalize({key: "1" * 5000})
    assert exc.value.param == key


def test_values_beyond_int64_rejected() -> None:
    with pytest.raises(PaginationError) as exc:
        normalize({"limit": str(10**20)})
    assert exc.value.param == "limit"
    assert normalize({"skip": str(2**63 - 1)}).skip == 2**63 - 1


def test_computed_skip_beyond_int64_rejected() -> None:
    with pytest.raises(PaginationError) as exc:
        normalize({"page": str(2**62), "limit": "100"})
    assert exc.value.param == "page"


def test_negative_skip_rejected() -> None:
    with pytest.raises(PaginationError):
        normalize({"skip": "-1"})


def test_max_limit_clamps() -> None:
    config = ListQueryConfig(max_limit=50)
    assert normalize({"limit": "500"}, config).limit == 50


def test_config_defaults_apply() -> None:
    config = ListQueryConfig(default_limit=5, default_sort="name")
    p = normalize({"page": "2"}, config)
    assert (p.limit, p.skip, p.sort) == (5, 5, "name")


def test_repeated_scalars_take_first() -> None:
    p = normalize({"page": ["2", "9"], "sort": ["name", "-age"], "q": ["a", "b"]})
    assert (p.page, p.sort, p.q) == (2, "name", "a")


def test_blank_sort_uses_default() -> None:
    assert normalize({"sort": "  "}).sort == "-createdAt"
    assert normalize({"sort": "-"}).sort == "-createdAt"


def test_search_term_is_stripped() -> None:
    assert normalize({"q": "  john "}).q == "john"


def test_fields_split_deduped_in_order() -> None:
    p = normalize({"fields": "name,,email,name, age ,"})
    assert p.fields == ("name", "email", "age")


def test_repeated_fields_are_concatenated() -> None:
    assert normalize({"fields": ["name,email", "email,role"]}).fields == (
        "name",
        "email",
        "role",
    )


def test_operator_sort_field_rejected() -> None:
    with pytest.raises(FilterParseError):
        normalize({"sort": "-$where"})


def test_operator_projection_field_rejected() -> None:
    with pytest.raises(FilterParseError):
        normalize({"fields": "name,$expr"})


def test_invalid_config_rejected() -> None:
    with pytest.raises(ValueError):
        ListQueryConfig(default_limit=0)
    with pytest.raises(ValueError):
        ListQueryConfig(default_limit=20, max_limit=10)
