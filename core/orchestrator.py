from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from core.config import DashboardSettings, get_settings
from core.data import REPORT_STATUSES, ReportRecord, SyntheticDataSource, UserRecord
from core.errors import DashboardError, FilterApplyFailure, LoadFailure, RefreshFailure
from core.filters import DEFAULT_FILTER, FilterSpec, normalize_filter
from core.scheduler import PeriodicTask
from core.table import query_user_table
from core.views import DerivedViews, build_derived_views, default_views


logger = logging.getLogger(__name__)

REPORT_FIELDS = ("title", "description", "status", "last_generated", "size", "type")


class DashboardStatus(str, Enum):
    INITIALIZING = "initializing"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class DashboardSnapshot:
    status: DashboardStatus
    error: Optional[str]
    draft_filter: FilterSpec
    applied_filter: FilterSpec
    last_updated: datetime
    users: Tuple[UserRecord, ...] = ()
    reports: Tuple[ReportRecord, ...] = ()
    views: DerivedViews = field(default_factory=default_views)
    auto_refresh: bool = False

    @property
    def is_loading(self) -> bool:
        return self.status is DashboardStatus.LOADING


class DashboardOrchestrator:
    """Single owner of the base dataset, the filters and the derived views.

    Operations that simulate a network call suspend once (``asyncio.sleep``) and then
    commit in one synchronous step: new users/filter and the views built from them are
    computed first and swapped in together, so readers never see a half-updated pair.
    Overlapping ``apply_filter`` calls are sequenced and only the latest one commits.
    """

    def __init__(
        self,
        settings: Optional[DashboardSettings] = None,
        *,
        source: Optional[SyntheticDataSource] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.source = source or SyntheticDataSource(self.settings.seed)

        self._status = DashboardStatus.INITIALIZING
        self._error: Optional[str] = None
        self._draft = DEFAULT_FILTER
        self._applied = DEFAULT_FILTER
        self._users: Tuple[UserRecord, ...] = ()
        self._reports: Tuple[ReportRecord, ...] = ()
        self._views = default_views()
        self._last_updated = datetime.now()

        self._pending = 0
        self._apply_seq = 0
        self._closed = False
        self._auto_refresh: Optional[PeriodicTask] = None

    async def __aenter__(self) -> "DashboardOrchestrator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ---------------- Read surface ----------------
    @property
    def status(self) -> DashboardStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def applied_filter(self) -> FilterSpec:
        return self._applied

    @property
    def draft_filter(self) -> FilterSpec:
        return self._draft

    @property
    def views(self) -> DerivedViews:
        return self._views

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def auto_refresh_enabled(self) -> bool:
        return self._auto_refresh is not None and self._auto_refresh.running

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            status=self._status,
            error=self._error,
            draft_filter=self._draft,
            applied_filter=self._applied,
            last_updated=self._last_updated,
            users=self._users,
            reports=self._reports,
            views=self._views,
            auto_refresh=self.auto_refresh_enabled,
        )

    def get_export_snapshot(self) -> Tuple[UserRecord, ...]:
        return self._views.users

    def query_users(self, **kwargs: Any) -> Dict[str, Any]:
        return query_user_table(self._views.users, **kwargs)

    # ---------------- Internals ----------------
    def _build_views(self, users: Sequence[UserRecord], applied: FilterSpec) -> DerivedViews:
        return build_derived_views(users, applied, rng=self.source.rng, as_of=self.source.today())

    def _begin(self) -> None:
        self._pending += 1
        self._status = DashboardStatus.LOADING
        self._error = None

    def _end(self) -> None:
        self._pending -= 1
        if self._pending == 0:
            self._status = DashboardStatus.READY

    def _fail(self, exc: DashboardError) -> None:
        logger.exception("%s: %s", exc.user_message, exc.detail)
        self._error = exc.user_message

    def _discard(self, what: str) -> bool:
        if self._closed:
            logger.debug("Dashboard closed; discarding %s result", what)
            return True
        return False

    # ---------------- Operations ----------------
    async def initialize(self) -> None:
        self._begin()
        try:
            await asyncio.sleep(self.settings.load_latency)
            if self._discard("load"):
                return
            try:
                users = self.source.generate_users(self.settings.user_count)
                reports = tuple(self.source.generate_reports())
                views = self._build_views(users, self._applied)
            except Exception as exc:
                raise LoadFailure(str(exc)) from exc
            self._users, self._reports, self._views = users, reports, views
            self._last_updated = datetime.now()
            logger.info("Loaded %d users and %d reports", len(users), len(reports))
        except DashboardError as exc:
            self._fail(exc)
        finally:
            self._end()

    def set_draft_filter(self, spec: Mapping[str, object] | FilterSpec) -> FilterSpec:
        self._draft = normalize_filter(spec)
        return self._draft

    async def apply_filter(self, spec: Mapping[str, object] | FilterSpec) -> bool:
        """Commit ``spec`` as both draft and applied filter after the simulated latency.

        Returns False when the call was superseded by a later apply/reset (or the
        dashboard was closed) or when it failed.
        """
        self._apply_seq += 1
        seq = self._apply_seq
        self._begin()
        try:
            await asyncio.sleep(self.settings.apply_latency)
            if self._discard("filter apply"):
                return False
            if seq != self._apply_seq:
                logger.debug("Filter apply #%d superseded by #%d", seq, self._apply_seq)
                return False
            try:
                applied = normalize_filter(spec)
                views = self._build_views(self._users, applied)
            except Exception as exc:
                raise FilterApplyFailure(str(exc)) from exc
            self._draft = self._applied = applied
            self._views = views
            logger.info("Applied filter %s: %d of %d users", applied, len(views.users), len(self._users))
            return True
        except DashboardError as exc:
            self._fail(exc)
            return False
        finally:
            self._end()

    def reset_filter(self) -> None:
        # Supersedes any apply still waiting on its latency.
        self._apply_seq += 1
        self._draft = self._applied = DEFAULT_FILTER
        self._views = self._build_views(self._users, DEFAULT_FILTER)

    async def refresh(self) -> None:
        self._begin()
        try:
            await asyncio.sleep(self.settings.refresh_latency)
            if self._discard("refresh"):
                return
            try:
                users = self.source.refresh_users(self._users)
                views = self._build_views(users, self._applied)
            except Exception as exc:
                raise RefreshFailure(str(exc)) from exc
            self._users, self._views = users, views
            logger.info("Refreshed %d users", len(users))
        except DashboardError as exc:
            self._fail(exc)
        finally:
            self._end()
            if not self._closed:
                self._last_updated = datetime.now()

    def add_report(self, report: Mapping[str, Any]) -> ReportRecord:
        missing = [f for f in REPORT_FIELDS if f not in report]
        if missing:
            raise ValueError(f"Missing report fields: {', '.join(missing)}")
        if report["status"] not in REPORT_STATUSES:
            raise ValueError(f"Unknown report status '{report['status']}'")

        next_id = max((r.id for r in self._reports), default=0) + 1
        record = ReportRecord(id=next_id, **{f: str(report[f]) for f in REPORT_FIELDS})
        self._reports = self._reports + (record,)
        return record

    # ---------------- Auto refresh / teardown ----------------
    def start_auto_refresh(self, interval: Optional[float] = None) -> None:
        if self._closed:
            raise RuntimeError("Dashboard is closed")
        if self.auto_refresh_enabled:
            return
        self._auto_refresh = PeriodicTask(
            self.refresh,
            interval or self.settings.auto_refresh_interval,
            name="dashboard-auto-refresh",
        )
        self._auto_refresh.start()

    async def stop_auto_refresh(self) -> None:
        task, self._auto_refresh = self._auto_refresh, None
        if task is not None:
            await task.cancel()

    async def close(self) -> None:
        self._closed = True
        await self.stop_auto_refresh()
