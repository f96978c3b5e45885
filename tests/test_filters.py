from __future__ import annotations

from datetime import date

import pytest

from core.filters import DEFAULT_FILTER, FilterSpec, filter_users, matches, normalize_filter
from tests.conftest import make_user


def test_default_filter_matches_everything(three_users) -> None:
    assert DEFAULT_FILTER.is_default
    assert filter_users(three_users, DEFAULT_FILTER) == tuple(three_users)


def test_search_is_case_insensitive_on_name_or_email() -> None:
    user = make_user(1, name="Grace Lee")
    assert matches(user, FilterSpec(search_term="GRACE"))
    assert matches(user, FilterSpec(search_term="lee@example"))
    assert not matches(user, FilterSpec(search_term="henry"))


def test_status_all_or_exact() -> None:
    user = make_user(1, status="pending")
    assert matches(user, FilterSpec(status="all"))
    assert matches(user, FilterSpec(status="pending"))
    assert not matches(user, FilterSpec(status="active"))


def test_date_bounds_are_inclusive() -> None:
    user = make_user(1, signup_date=date(2024, 3, 1))
    assert matches(user, FilterSpec(date_from=date(2024, 3, 1)))
    assert matches(user, FilterSpec(date_to=date(2024, 3, 1)))
    assert matches(user, FilterSpec(date_from=date(2024, 3, 1), date_to=date(2024, 3, 1)))
    assert not matches(user, FilterSpec(date_from=date(2024, 3, 2)))
    assert not matches(user, FilterSpec(date_to=date(2024, 2, 29)))


def test_all_criteria_must_hold() -> None:
    user = make_user(1, name="Ivy Chen", status="active", signup_date=date(2024, 1, 10))
    spec = FilterSpec(date_from=date(2024, 1, 1), status="active", search_term="ivy")
    assert matches(user, spec)
    assert not matches(user, FilterSpec(date_from=date(2024, 1, 1), status="inactive", search_term="ivy"))


def test_filter_preserves_order_and_is_repeatable(three_users) -> None:
    spec = FilterSpec(status="active")
    first = filter_users(three_users, spec)
    assert [u.id for u in first] == ["user-1", "user-2"]
    assert filter_users(three_users, spec) == first


def test_normalize_filter_from_raw_body() -> None:
    spec = normalize_filter({"date_from": "2024-01-01", "date_to": "", "status": "Active", "search_term": "  doe "})
    assert spec == FilterSpec(date_from=date(2024, 1, 1), date_to=None, status="active", search_term="doe")
    assert normalize_filter(None) == DEFAULT_FILTER
    assert normalize_filter(spec) is spec


@pytest.mark.parametrize("raw", [{"status": "deleted"}, {"date_from": "not-a-date"}])
def test_normalize_filter_rejects_bad_input(raw) -> None:
    with pytest.raises(ValueError):
        normalize_filter(raw)
