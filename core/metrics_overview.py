from __future__ import annotations

from dataclasses import dataclass
from typing import List

from core.data import format_currency_0
from core.metrics_base import BaseMetrics


FILTERED_DESCRIPTION = "from filtered data"
LOADING_DESCRIPTION = "loading..."
NO_DATA_DESCRIPTION = "no matching data"

# (threshold, change above threshold, change at or below threshold)
REVENUE_CHANGE = (50000, "+20.1%", "+15.3%")
ACTIVE_USERS_CHANGE = (20, "+18.1%", "+12.5%")
CONVERSIONS_CHANGE = (10, "+19%", "+8.2%")
CONVERSION_RATE_CHANGE = (50, "+2.1%", "-1.8%")


@dataclass(frozen=True)
class MetricCard:
    title: str
    value: str
    raw_value: float
    change: str
    change_type: str
    description: str


def _pick(value: float, rule: tuple) -> str:
    threshold, above, below = rule
    return above if value > threshold else below


def build_summary_cards(base: BaseMetrics) -> List[MetricCard]:
    if base.total_users == 0:
        return default_summary_cards(NO_DATA_DESCRIPTION)

    rate_positive = base.conversion_rate > CONVERSION_RATE_CHANGE[0]
    return [
        MetricCard(
            title="Total Revenue",
            value=format_currency_0(base.total_revenue),
            raw_value=base.total_revenue,
            change=_pick(base.total_revenue, REVENUE_CHANGE),
            change_type="positive",
            description=FILTERED_DESCRIPTION,
        ),
        MetricCard(
            title="Active Users",
            value=str(base.active_users),
            raw_value=base.active_users,
            change=_pick(base.active_users, ACTIVE_USERS_CHANGE),
            change_type="positive",
            description=FILTERED_DESCRIPTION,
        ),
        MetricCard(
            title="Conversions",
            value=str(base.conversions),
            raw_value=base.conversions,
            change=_pick(base.conversions, CONVERSIONS_CHANGE),
            change_type="positive",
            description=FILTERED_DESCRIPTION,
        ),
        MetricCard(
            title="Conversion Rate",
            value=f"{base.conversion_rate:.1f}%",
            raw_value=base.conversion_rate,
            change=_pick(base.conversion_rate, CONVERSION_RATE_CHANGE),
            change_type="positive" if rate_positive else "negative",
            description=FILTERED_DESCRIPTION,
        ),
    ]


def default_summary_cards(description: str = LOADING_DESCRIPTION) -> List[MetricCard]:
    return [
        MetricCard(title=title, value=value, raw_value=0, change="+0%", change_type="positive", description=description)
        for title, value in (
            ("Total Revenue", "$0"),
            ("Active Users", "0"),
            ("Conversions", "0"),
            ("Conversion Rate", "0%"),
        )
    ]
