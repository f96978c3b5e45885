from __future__ import annotations

from dataclasses import dataclass
from typing import List

from core.metrics_base import BaseMetrics


HIGH_VALUE_REVENUE = 5000
LOW_VALUE_REVENUE = 2000
REVENUE_BASELINE = 3000
HIGH_ENGAGEMENT_PCT = 70
LOW_ENGAGEMENT_PCT = 40
GROWTH_SHARE = 0.3
SMALL_SAMPLE = 10


@dataclass(frozen=True)
class Insight:
    id: int
    title: str
    description: str
    type: str
    impact: str
    category: str
    actionable: bool


def build_insights(base: BaseMetrics) -> List[Insight]:
    """Rule-based observations about the filtered segment. Empty when nothing matched."""
    if base.total_users == 0:
        return []

    out: List[Insight] = []
    avg = base.avg_revenue
    if avg > HIGH_VALUE_REVENUE:
        above = round((avg - REVENUE_BASELINE) / REVENUE_BASELINE * 100)
        out.append(
            Insight(
                id=1,
                title="High-Value User Segment",
                description=(
                    f"Your filtered user segment shows exceptional value with an average revenue of ${avg:.0f} "
                    f"per user. This is {above}% above the baseline."
                ),
                type="positive",
                impact="high",
                category="Revenue",
                actionable=True,
            )
        )
    elif avg < LOW_VALUE_REVENUE:
        out.append(
            Insight(
                id=1,
                title="Revenue Optimization Opportunity",
                description=(
                    f"The current filtered segment shows lower average revenue of ${avg:.0f} per user. "
                    "Consider targeted upselling campaigns for this segment."
                ),
                type="opportunity",
                impact="high",
                category="Revenue",
                actionable=True,
            )
        )

    rate = base.conversion_rate
    if rate > HIGH_ENGAGEMENT_PCT:
        out.append(
            Insight(
                id=2,
                title="Excellent User Engagement",
                description=(
                    f"{rate:.1f}% of users in this segment are active, indicating strong product-market fit. "
                    "This segment could be ideal for referral programs."
                ),
                type="achievement",
                impact="medium",
                category="Engagement",
                actionable=True,
            )
        )
    elif rate < LOW_ENGAGEMENT_PCT:
        out.append(
            Insight(
                id=2,
                title="Engagement Improvement Needed",
                description=(
                    f"Only {rate:.1f}% of users in this segment are active. "
                    "Consider re-engagement campaigns or product improvements for this group."
                ),
                type="warning",
                impact="high",
                category="Engagement",
                actionable=True,
            )
        )

    if base.recent_signups > base.total_users * GROWTH_SHARE:
        share = round(base.recent_signups / base.total_users * 100)
        out.append(
            Insight(
                id=3,
                title="Strong Growth Momentum",
                description=(
                    f"{base.recent_signups} users ({share}%) joined in the last 30 days. "
                    "This segment shows healthy growth patterns."
                ),
                type="positive",
                impact="medium",
                category="Growth",
                actionable=False,
            )
        )

    if base.total_users < SMALL_SAMPLE:
        out.append(
            Insight(
                id=4,
                title="Limited Data Sample",
                description=(
                    f"Current filters result in only {base.total_users} users. Consider broadening filters "
                    "for more comprehensive insights and better statistical significance."
                ),
                type="warning",
                impact="medium",
                category="Data Quality",
                actionable=True,
            )
        )
    return out
