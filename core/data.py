from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


USER_STATUSES = ("active", "inactive", "pending")
REPORT_STATUSES = ("completed", "processing", "scheduled")
COUNTRIES = ("USA", "UK", "Canada", "Germany", "France", "Australia", "Japan", "Brazil")
NAMES = (
    "John Doe",
    "Jane Smith",
    "Bob Johnson",
    "Alice Brown",
    "Charlie Wilson",
    "Diana Davis",
    "Eve Miller",
    "Frank Garcia",
    "Grace Lee",
    "Henry Taylor",
    "Ivy Chen",
    "Jack Robinson",
    "Kate Williams",
    "Liam Anderson",
    "Mia Thompson",
    "Noah Davis",
    "Olivia Wilson",
    "Paul Martinez",
    "Quinn Taylor",
    "Ruby Johnson",
)

DEFAULT_USER_COUNT = 50
REVENUE_MIN = 100
REVENUE_SPAN = 10000
LAST_ACTIVE_WINDOW_DAYS = 30
SIGNUP_WINDOW_DAYS = 365

# Per-record probabilities used by a simulated refresh.
REFRESH_LAST_ACTIVE_P = 0.3
REFRESH_REVENUE_P = 0.2

USER_COLUMNS = ["id", "name", "email", "status", "revenue", "last_active", "signup_date", "country"]


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    status: str
    revenue: int
    last_active: date
    signup_date: date
    country: str


@dataclass(frozen=True)
class ReportRecord:
    id: int
    title: str
    description: str
    status: str
    last_generated: str
    size: str
    type: str


BASE_REPORTS: Tuple[ReportRecord, ...] = (
    ReportRecord(
        id=1,
        title="Monthly Performance Report",
        description="Comprehensive analysis of monthly metrics and KPIs",
        status="completed",
        last_generated="2024-01-15",
        size="2.4 MB",
        type="PDF",
    ),
    ReportRecord(
        id=2,
        title="User Engagement Analysis",
        description="Detailed breakdown of user behavior and engagement patterns",
        status="processing",
        last_generated="2024-01-14",
        size="1.8 MB",
        type="Excel",
    ),
    ReportRecord(
        id=3,
        title="Revenue Analytics Report",
        description="Financial performance and revenue trend analysis",
        status="completed",
        last_generated="2024-01-13",
        size="3.1 MB",
        type="PDF",
    ),
    ReportRecord(
        id=4,
        title="Traffic Sources Report",
        description="Analysis of traffic sources and conversion rates",
        status="scheduled",
        last_generated="2024-01-12",
        size="1.5 MB",
        type="CSV",
    ),
)


def email_for(name: str) -> str:
    return f"{name.lower().replace(' ', '.', 1)}@example.com"


class SyntheticDataSource:
    """Seedable source of mock users and of the random jitter used by the chart builders.

    Pass ``seed`` (or a ready ``numpy.random.Generator``) for reproducible output and
    ``today`` to pin the calendar.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.today = today

    def random_revenue(self) -> int:
        return int(self.rng.integers(0, REVENUE_SPAN)) + REVENUE_MIN

    def generate_users(self, count: int = DEFAULT_USER_COUNT) -> Tuple[UserRecord, ...]:
        today = self.today()
        users: List[UserRecord] = []
        for i in range(count):
            name = NAMES[i % len(NAMES)]
            users.append(
                UserRecord(
                    id=f"user-{i + 1}",
                    name=name,
                    email=email_for(name),
                    status=USER_STATUSES[int(self.rng.integers(0, len(USER_STATUSES)))],
                    revenue=self.random_revenue(),
                    last_active=today - timedelta(days=int(self.rng.integers(0, LAST_ACTIVE_WINDOW_DAYS))),
                    signup_date=today - timedelta(days=int(self.rng.integers(0, SIGNUP_WINDOW_DAYS))),
                    country=COUNTRIES[int(self.rng.integers(0, len(COUNTRIES)))],
                )
            )
        return tuple(users)

    def generate_reports(self) -> Tuple[ReportRecord, ...]:
        return BASE_REPORTS

    def refresh_users(self, users: Sequence[UserRecord]) -> Tuple[UserRecord, ...]:
        """Re-roll last-active and revenue on a random subset; other fields are kept."""
        today = self.today()
        out: List[UserRecord] = []
        for user in users:
            changes = {}
            if self.rng.random() < REFRESH_LAST_ACTIVE_P:
                changes["last_active"] = today
            if self.rng.random() < REFRESH_REVENUE_P:
                changes["revenue"] = self.random_revenue()
            out.append(replace(user, **changes) if changes else user)
        return tuple(out)


def users_to_frame(users: Iterable[UserRecord]) -> pd.DataFrame:
    rows = [asdict(u) for u in users]
    if not rows:
        return pd.DataFrame(columns=USER_COLUMNS)
    return pd.DataFrame(rows, columns=USER_COLUMNS)


def format_currency_0(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"${float(value):,.0f}"


def format_long_date(value: date) -> str:
    """``Jan 5, 2024`` style used in the text report."""
    return f"{value:%b} {value.day}, {value.year}"
