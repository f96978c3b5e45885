from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from core.metrics_analytics import MONTHS
from core.metrics_base import BaseMetrics


# revenue = floor(total_revenue/7    * (0.8 + 0.1*i  + U[0, 0.3)))
# users   = floor(max(total/7, 1)    * (0.9 + 0.05*i + U[0, 0.2)))
REVENUE_BASE, REVENUE_STEP, REVENUE_JITTER = 0.8, 0.1, 0.3
USERS_BASE, USERS_STEP, USERS_JITTER = 0.9, 0.05, 0.2

# (name, share of total users, minimum segment size, fill)
DEVICE_SPLIT = (
    ("Desktop", 0.40, 10, "hsl(var(--chart-1))"),
    ("Mobile", 0.35, 8, "hsl(var(--chart-2))"),
    ("Tablet", 0.20, 5, "hsl(var(--chart-3))"),
    ("Other", 0.05, 2, "hsl(var(--chart-4))"),
)
ENGAGEMENT_SPLIT = (
    ("New Users", 0.45, 10, "hsl(var(--chart-1))"),
    ("Returning Users", 0.35, 8, "hsl(var(--chart-2))"),
    ("Inactive Users", 0.20, 5, "hsl(var(--chart-3))"),
)

DEFAULT_TREND = (
    (4000, 2400),
    (3000, 1398),
    (2000, 9800),
    (2780, 3908),
    (1890, 4800),
    (2390, 3800),
    (3490, 4300),
)
DEFAULT_DEVICES = (400, 300, 200, 100)
DEFAULT_DISTRIBUTION = (45, 35, 20)


@dataclass(frozen=True)
class TrendPoint:
    month: str
    revenue: int
    users: int


@dataclass(frozen=True)
class Segment:
    name: str
    value: int
    fill: str


def build_trend_series(base: BaseMetrics, rng: Optional[np.random.Generator] = None) -> List[TrendPoint]:
    if base.total_users == 0:
        return default_trend_series()

    rng = rng if rng is not None else np.random.default_rng()
    base_revenue = base.total_revenue / 7
    base_users = max(base.total_users / 7, 1)
    return [
        TrendPoint(
            month=month,
            revenue=math.floor(base_revenue * (REVENUE_BASE + i * REVENUE_STEP + rng.random() * REVENUE_JITTER)),
            users=math.floor(base_users * (USERS_BASE + i * USERS_STEP + rng.random() * USERS_JITTER)),
        )
        for i, month in enumerate(MONTHS)
    ]


def _split(total_users: int, split: Sequence[tuple]) -> List[Segment]:
    return [
        Segment(name=name, value=math.floor(max(total_users * share, minimum)), fill=fill)
        for name, share, minimum, fill in split
    ]


def build_device_breakdown(base: BaseMetrics) -> List[Segment]:
    if base.total_users == 0:
        return default_device_breakdown()
    return _split(base.total_users, DEVICE_SPLIT)


def build_user_distribution(base: BaseMetrics) -> List[Segment]:
    if base.total_users == 0:
        return default_user_distribution()
    return _split(base.total_users, ENGAGEMENT_SPLIT)


def default_trend_series() -> List[TrendPoint]:
    return [TrendPoint(month=m, revenue=r, users=u) for m, (r, u) in zip(MONTHS, DEFAULT_TREND)]


def default_device_breakdown() -> List[Segment]:
    return [Segment(name=s[0], value=v, fill=s[3]) for s, v in zip(DEVICE_SPLIT, DEFAULT_DEVICES)]


def default_user_distribution() -> List[Segment]:
    return [Segment(name=s[0], value=v, fill=s[3]) for s, v in zip(ENGAGEMENT_SPLIT, DEFAULT_DISTRIBUTION)]


def _pct_change(first: float, last: float) -> Optional[float]:
    if not first:
        return None
    return round((last - first) / first * 100, 1)


def _share(segments: Sequence[Segment], name: str) -> float:
    total = sum(s.value for s in segments)
    if not total:
        return 0.0
    value = next((s.value for s in segments if s.name == name), 0)
    return round(value / total * 100, 1)


def summarize_charts(
    trend: Sequence[TrendPoint],
    devices: Sequence[Segment],
    distribution: Sequence[Segment],
) -> Dict[str, Any]:
    """Headline numbers shown next to each chart, computed from the series themselves."""
    revenue_total = sum(p.revenue for p in trend)
    users_total = sum(p.users for p in trend)
    best_revenue = max(trend, key=lambda p: p.revenue) if trend else None
    best_users = max(trend, key=lambda p: p.users) if trend else None
    top_device = max(devices, key=lambda s: s.value) if devices else None

    return {
        "revenue": {
            "total_revenue": revenue_total,
            "total_users": users_total,
            "avg_revenue": revenue_total / len(trend) if trend else 0.0,
            "growth_pct": _pct_change(trend[0].revenue, trend[-1].revenue) if len(trend) > 1 else 0.0,
            "best_month": best_revenue.month if best_revenue else None,
        },
        "devices": {
            "total_devices": sum(s.value for s in devices),
            "top_device": top_device.name if top_device else None,
            "mobile_pct": _share(devices, "Mobile"),
        },
        "distribution": {
            "total_users": sum(s.value for s in distribution),
            "new_user_pct": _share(distribution, "New Users"),
            "retention_pct": _share(distribution, "Returning Users"),
        },
        "conversions": {
            "total_conversions": users_total,
            "avg_conversions": users_total / len(trend) if trend else 0.0,
            "best_month": best_users.month if best_users else None,
            "trend_pct": _pct_change(trend[0].users, trend[-1].users) if len(trend) > 1 else 0.0,
        },
    }
