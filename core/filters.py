from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Tuple

import pandas as pd

from core.data import USER_STATUSES, UserRecord


ALL_STATUSES = "all"


@dataclass(frozen=True)
class FilterSpec:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: str = ALL_STATUSES
    search_term: str = ""

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_FILTER


DEFAULT_FILTER = FilterSpec()


def _as_date(value: object) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        ts = pd.to_datetime(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Could not parse date value '{value}'") from exc
    if pd.isna(ts):
        raise ValueError(f"Could not parse date value '{value}'")
    return ts.date()


def normalize_filter(raw: Mapping[str, object] | FilterSpec | None) -> FilterSpec:
    """Build a FilterSpec from an API body or pass one through unchanged.

    Raises ValueError for an unknown status or an unparseable date.
    """
    if raw is None:
        return DEFAULT_FILTER
    if isinstance(raw, FilterSpec):
        return raw

    status = str(raw.get("status") or ALL_STATUSES).strip().lower()
    if status != ALL_STATUSES and status not in USER_STATUSES:
        raise ValueError(f"Unknown status '{status}'")

    return FilterSpec(
        date_from=_as_date(raw.get("date_from")),
        date_to=_as_date(raw.get("date_to")),
        status=status,
        search_term=str(raw.get("search_term") or "").strip(),
    )


def matches_search(record: UserRecord, search_term: str) -> bool:
    if not search_term:
        return True
    q = search_term.lower()
    return q in record.name.lower() or q in record.email.lower()


def matches_status(record: UserRecord, status: str) -> bool:
    return status == ALL_STATUSES or record.status == status


def matches_dates(record: UserRecord, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is not None and record.signup_date < date_from:
        return False
    if date_to is not None and record.signup_date > date_to:
        return False
    return True


def matches(record: UserRecord, spec: FilterSpec) -> bool:
    return (
        matches_search(record, spec.search_term)
        and matches_status(record, spec.status)
        and matches_dates(record, spec.date_from, spec.date_to)
    )


def filter_users(users: Iterable[UserRecord], spec: FilterSpec) -> Tuple[UserRecord, ...]:
    return tuple(u for u in users if matches(u, spec))
