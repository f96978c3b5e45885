from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from core.data import UserRecord
from core.filters import FilterSpec, filter_users
from core.insights import Insight, build_insights
from core.metrics_analytics import AnalyticsPoint, build_analytics_series, default_analytics_series
from core.metrics_base import EMPTY_METRICS, BaseMetrics, compute_base_metrics
from core.metrics_charts import (
    Segment,
    TrendPoint,
    build_device_breakdown,
    build_trend_series,
    build_user_distribution,
    default_device_breakdown,
    default_trend_series,
    default_user_distribution,
    summarize_charts,
)
from core.metrics_overview import MetricCard, build_summary_cards, default_summary_cards


@dataclass(frozen=True)
class DerivedViews:
    """Everything the display layer shows for one (dataset, applied filter) pair.

    ``users`` is the filtered collection itself: the table and both exports read it,
    so exported rows always match the numbers on screen.
    """

    users: Tuple[UserRecord, ...] = ()
    base: BaseMetrics = EMPTY_METRICS
    summary: Tuple[MetricCard, ...] = field(default_factory=lambda: tuple(default_summary_cards()))
    analytics: Tuple[AnalyticsPoint, ...] = field(default_factory=lambda: tuple(default_analytics_series()))
    trend: Tuple[TrendPoint, ...] = field(default_factory=lambda: tuple(default_trend_series()))
    devices: Tuple[Segment, ...] = field(default_factory=lambda: tuple(default_device_breakdown()))
    distribution: Tuple[Segment, ...] = field(default_factory=lambda: tuple(default_user_distribution()))
    insights: Tuple[Insight, ...] = ()

    def chart_summary(self) -> Dict[str, Any]:
        return summarize_charts(self.trend, self.devices, self.distribution)


def default_views() -> DerivedViews:
    return DerivedViews()


def build_views_from_metrics(
    users: Tuple[UserRecord, ...],
    base: BaseMetrics,
    *,
    rng: Optional[np.random.Generator] = None,
) -> DerivedViews:
    return DerivedViews(
        users=users,
        base=base,
        summary=tuple(build_summary_cards(base)),
        analytics=tuple(build_analytics_series(base, rng)),
        trend=tuple(build_trend_series(base, rng)),
        devices=tuple(build_device_breakdown(base)),
        distribution=tuple(build_user_distribution(base)),
        insights=tuple(build_insights(base)),
    )


def build_derived_views(
    users: Sequence[UserRecord],
    spec: FilterSpec,
    *,
    rng: Optional[np.random.Generator] = None,
    as_of: Optional[date] = None,
) -> DerivedViews:
    """Filter once, aggregate once, then fan the aggregate out to every view."""
    if not users:
        return default_views()
    filtered = filter_users(users, spec)
    base = compute_base_metrics(filtered, as_of=as_of)
    return build_views_from_metrics(filtered, base, rng=rng)
