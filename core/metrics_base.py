from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from core.data import UserRecord, users_to_frame


CONVERSION_FACTOR = 0.23
RECENT_SIGNUP_DAYS = 30


@dataclass(frozen=True)
class BaseMetrics:
    """Canonical aggregate of one filtered user set; every displayed number derives from it."""

    total_revenue: int = 0
    active_users: int = 0
    inactive_users: int = 0
    pending_users: int = 0
    total_users: int = 0
    conversion_rate: float = 0.0
    conversions: int = 0
    avg_revenue: float = 0.0
    country_distribution: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    recent_signups: int = 0

    def to_dict(self) -> Dict[str, Any]:
        # asdict() cannot deep-copy the read-only country map
        out = {k: v for k, v in self.__dict__.items() if k != "country_distribution"}
        out["country_distribution"] = dict(self.country_distribution)
        return out


EMPTY_METRICS = BaseMetrics()


def compute_base_metrics(users: Iterable[UserRecord], *, as_of: Optional[date] = None) -> BaseMetrics:
    df = users_to_frame(users)
    total_users = int(len(df))
    if total_users == 0:
        return EMPTY_METRICS

    total_revenue = int(df["revenue"].sum())
    status_counts = df["status"].value_counts()
    active_users = int(status_counts.get("active", 0))
    inactive_users = int(status_counts.get("inactive", 0))
    pending_users = int(status_counts.get("pending", 0))

    country_counts = df["country"].value_counts()
    country_distribution = MappingProxyType({str(k): int(country_counts[k]) for k in sorted(country_counts.index)})

    as_of = as_of or date.today()
    cutoff = as_of - timedelta(days=RECENT_SIGNUP_DAYS)
    recent_signups = int((pd.to_datetime(df["signup_date"]) > pd.Timestamp(cutoff)).sum())

    return BaseMetrics(
        total_revenue=total_revenue,
        active_users=active_users,
        inactive_users=inactive_users,
        pending_users=pending_users,
        total_users=total_users,
        conversion_rate=active_users / total_users * 100,
        conversions=math.floor(total_users * CONVERSION_FACTOR),
        avg_revenue=total_revenue / total_users,
        country_distribution=country_distribution,
        recent_signups=recent_signups,
    )
