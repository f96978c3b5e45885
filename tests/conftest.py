from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

import pytest

from core.config import DashboardSettings
from core.data import SyntheticDataSource, UserRecord, email_for


TODAY = date(2024, 6, 15)


def make_user(
    n: int,
    *,
    name: str = "John Doe",
    status: str = "active",
    revenue: int = 1000,
    signup_date: Optional[date] = None,
    last_active: Optional[date] = None,
    country: str = "USA",
    email: Optional[str] = None,
) -> UserRecord:
    return UserRecord(
        id=f"user-{n}",
        name=name,
        email=email or email_for(name),
        status=status,
        revenue=revenue,
        last_active=last_active or TODAY,
        signup_date=signup_date or TODAY - timedelta(days=100),
        country=country,
    )


class FixedSource(SyntheticDataSource):
    """Data source that serves a hand-built user list instead of random users."""

    def __init__(self, users: Iterable[UserRecord], seed: int = 1) -> None:
        super().__init__(seed, today=lambda: TODAY)
        self.fixed_users = tuple(users)

    def generate_users(self, count: int = 50):
        return self.fixed_users


class BrokenSource(SyntheticDataSource):
    def generate_users(self, count: int = 50):
        raise RuntimeError("generator exploded")


@pytest.fixture
def settings() -> DashboardSettings:
    return DashboardSettings(load_latency=0, apply_latency=0, refresh_latency=0, seed=7)


@pytest.fixture
def source() -> SyntheticDataSource:
    return SyntheticDataSource(seed=7, today=lambda: TODAY)


@pytest.fixture
def three_users():
    return [
        make_user(1, name="John Doe", status="active", revenue=100, country="USA"),
        make_user(2, name="Jane Smith", status="active", revenue=200, country="UK"),
        make_user(3, name="Bob Johnson", status="inactive", revenue=300, country="USA"),
    ]
