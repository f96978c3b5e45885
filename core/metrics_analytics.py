from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from core.metrics_base import BaseMetrics


MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul")

# sessions   = floor(m * (50  + 10*i + U[0, 20)))
# page_views = floor(m * (150 + 30*i + U[0, 50)))
# bounce     = floor(30 + U[0, 15))             -> integer in [30, 44]
SESSIONS_BASE, SESSIONS_STEP, SESSIONS_JITTER = 50, 10, 20
PAGE_VIEWS_BASE, PAGE_VIEWS_STEP, PAGE_VIEWS_JITTER = 150, 30, 50
BOUNCE_MIN, BOUNCE_JITTER = 30, 15


@dataclass(frozen=True)
class AnalyticsPoint:
    month: str
    sessions: int
    page_views: int
    bounce_rate: int


def traffic_multiplier(base: BaseMetrics) -> float:
    return max(base.total_users / 10, 1)


def build_analytics_series(base: BaseMetrics, rng: Optional[np.random.Generator] = None) -> List[AnalyticsPoint]:
    if base.total_users == 0:
        return default_analytics_series()

    rng = rng if rng is not None else np.random.default_rng()
    m = traffic_multiplier(base)
    return [
        AnalyticsPoint(
            month=month,
            sessions=math.floor(m * (SESSIONS_BASE + i * SESSIONS_STEP + rng.random() * SESSIONS_JITTER)),
            page_views=math.floor(m * (PAGE_VIEWS_BASE + i * PAGE_VIEWS_STEP + rng.random() * PAGE_VIEWS_JITTER)),
            bounce_rate=math.floor(rng.random() * BOUNCE_JITTER + BOUNCE_MIN),
        )
        for i, month in enumerate(MONTHS)
    ]


def default_analytics_series() -> List[AnalyticsPoint]:
    return [AnalyticsPoint(month=month, sessions=0, page_views=0, bounce_rate=0) for month in MONTHS]
