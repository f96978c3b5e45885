from __future__ import annotations

import math
from dataclasses import asdict
from typing import Any, Callable, Dict, Sequence

from core.data import USER_STATUSES, UserRecord
from core.filters import ALL_STATUSES, matches_search


SORT_FIELDS = ("name", "email", "signup_date", "status", "revenue", "country", "last_active")
ITEMS_PER_PAGE = 5
PAGE_SIZES = (5, 10, 20, 50)
ALL_COUNTRIES = "all"


def _sort_key(sort_field: str) -> Callable[[UserRecord], Any]:
    if sort_field == "revenue":
        return lambda u: u.revenue
    if sort_field in ("signup_date", "last_active"):
        return lambda u: getattr(u, sort_field)
    return lambda u: str(getattr(u, sort_field)).lower()


def query_user_table(
    users: Sequence[UserRecord],
    *,
    q: str = "",
    status: str = ALL_STATUSES,
    country: str = ALL_COUNTRIES,
    sort_field: str = "name",
    sort_direction: str = "asc",
    page: int = 1,
    per_page: int = ITEMS_PER_PAGE,
) -> Dict[str, Any]:
    """Local search, status/country narrowing, sort and pagination on top of an already filtered user set.

    ``countries`` lists the distinct countries of the incoming set, so a country picker
    keeps offering every option while a local country filter is active.
    Raises ValueError for an unknown status.
    """
    status = (status or ALL_STATUSES).strip().lower()
    if status != ALL_STATUSES and status not in USER_STATUSES:
        raise ValueError(f"Unknown status '{status}'")
    country = (country or ALL_COUNTRIES).strip()
    if sort_field not in SORT_FIELDS:
        sort_field = "name"
    descending = sort_direction == "desc"
    per_page = max(1, int(per_page))

    query = (q or "").strip()
    rows = [u for u in users if matches_search(u, query)]
    if status != ALL_STATUSES:
        rows = [u for u in rows if u.status == status]
    if country != ALL_COUNTRIES:
        rows = [u for u in rows if u.country == country]
    rows.sort(key=_sort_key(sort_field), reverse=descending)

    total_pages = math.ceil(len(rows) / per_page)
    page = max(1, min(int(page), total_pages or 1))
    start = (page - 1) * per_page

    return {
        "q": query,
        "status": status,
        "country": country,
        "countries": sorted({u.country for u in users}),
        "sort_field": sort_field,
        "sort_direction": "desc" if descending else "asc",
        "page": page,
        "per_page": per_page,
        "total": len(rows),
        "total_pages": total_pages,
        "rows": [asdict(u) for u in rows[start : start + per_page]],
    }
