from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
import logging
import math
from typing import Literal, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import AutoRefreshModel, FilterSpecModel, ReportCreateModel
from core.charts import device_chart, distribution_chart, trend_chart
from core.config import DashboardSettings, get_settings
from core.data import SyntheticDataSource
from core.export import CSV_PREFIX, REPORT_PREFIX, export_filename, users_to_csv, users_to_report
from core.filters import FilterSpec, normalize_filter
from core.orchestrator import DashboardOrchestrator, DashboardSnapshot


logger = logging.getLogger(__name__)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _filter_from_model(model: FilterSpecModel) -> FilterSpec:
    return normalize_filter(model.model_dump())


def _dashboard(request: Request) -> DashboardOrchestrator:
    return request.app.state.dashboard


def _attachment(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _state_payload(snap: DashboardSnapshot) -> dict:
    return {
        "status": snap.status,
        "is_loading": snap.is_loading,
        "error": snap.error,
        "last_updated": snap.last_updated,
        "draft_filter": asdict(snap.draft_filter),
        "applied_filter": asdict(snap.applied_filter),
        "auto_refresh": snap.auto_refresh,
        "counts": {
            "users": len(snap.users),
            "filtered_users": len(snap.views.users),
            "reports": len(snap.reports),
        },
    }


def _overview_payload(snap: DashboardSnapshot) -> dict:
    views = snap.views
    return {
        "filters": asdict(snap.applied_filter),
        "base_metrics": views.base.to_dict(),
        "summary": [asdict(card) for card in views.summary],
        "insights": [asdict(i) for i in views.insights],
    }


def create_app(
    settings: Optional[DashboardSettings] = None,
    *,
    source: Optional[SyntheticDataSource] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with DashboardOrchestrator(settings, source=source) as dashboard:
            app.state.dashboard = dashboard
            await dashboard.initialize()
            yield

    app = FastAPI(title="Insights Dashboard API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/state")
    async def state(request: Request):
        try:
            return _json(_state_payload(_dashboard(request).snapshot()))
        except Exception as exc:
            logger.exception("state failed")
            return _error(exc)

    @app.get("/overview")
    async def overview(request: Request):
        try:
            return _json(_overview_payload(_dashboard(request).snapshot()))
        except Exception as exc:
            logger.exception("overview failed")
            return _error(exc)

    @app.get("/analytics")
    async def analytics(request: Request):
        try:
            snap = _dashboard(request).snapshot()
            return _json({"filters": asdict(snap.applied_filter), "analytics": [asdict(p) for p in snap.views.analytics]})
        except Exception as exc:
            logger.exception("analytics failed")
            return _error(exc)

    @app.get("/charts")
    async def charts(request: Request):
        try:
            snap = _dashboard(request).snapshot()
            views = snap.views
            return _json(
                {
                    "filters": asdict(snap.applied_filter),
                    "trend": [asdict(p) for p in views.trend],
                    "devices": [asdict(s) for s in views.devices],
                    "distribution": [asdict(s) for s in views.distribution],
                    "summary": views.chart_summary(),
                    "charts": {
                        "revenue_trend": trend_chart(views.trend),
                        "devices": device_chart(views.devices),
                        "distribution": distribution_chart(views.distribution),
                    },
                }
            )
        except Exception as exc:
            logger.exception("charts failed")
            return _error(exc)

    @app.get("/users")
    async def users(
        request: Request,
        q: str = Query(default=""),
        status: Literal["all", "active", "inactive", "pending"] = Query(default="all"),
        country: str = Query(default="all"),
        sort_field: Literal["name", "email", "signup_date", "status", "revenue", "country", "last_active"] = Query(
            default="name"
        ),
        sort_direction: Literal["asc", "desc"] = Query(default="asc"),
        page: int = Query(default=1, ge=1),
        per_page: int = Query(default=10, ge=1, le=100),
    ):
        try:
            return _json(
                _dashboard(request).query_users(
                    q=q,
                    status=status,
                    country=country,
                    sort_field=sort_field,
                    sort_direction=sort_direction,
                    page=page,
                    per_page=per_page,
                )
            )
        except Exception as exc:
            logger.exception("users failed")
            return _error(exc)

    @app.put("/filters/draft")
    async def set_draft(request: Request, filters: FilterSpecModel):
        try:
            draft = _dashboard(request).set_draft_filter(_filter_from_model(filters))
            return _json({"draft_filter": asdict(draft)})
        except Exception as exc:
            logger.exception("set_draft failed")
            return _error(exc)

    @app.post("/filters/apply")
    async def apply_filters(request: Request, filters: FilterSpecModel):
        try:
            dashboard = _dashboard(request)
            committed = await dashboard.apply_filter(_filter_from_model(filters))
            snap = dashboard.snapshot()
            return _json({"committed": committed, "state": _state_payload(snap), "overview": _overview_payload(snap)})
        except Exception as exc:
            logger.exception("apply_filters failed")
            return _error(exc)

    @app.post("/filters/reset")
    async def reset_filters(request: Request):
        try:
            dashboard = _dashboard(request)
            dashboard.reset_filter()
            snap = dashboard.snapshot()
            return _json({"state": _state_payload(snap), "overview": _overview_payload(snap)})
        except Exception as exc:
            logger.exception("reset_filters failed")
            return _error(exc)

    @app.post("/refresh")
    async def refresh(request: Request):
        try:
            dashboard = _dashboard(request)
            await dashboard.refresh()
            snap = dashboard.snapshot()
            return _json({"state": _state_payload(snap), "overview": _overview_payload(snap)})
        except Exception as exc:
            logger.exception("refresh failed")
            return _error(exc)

    @app.post("/auto-refresh")
    async def auto_refresh(request: Request, body: AutoRefreshModel):
        try:
            dashboard = _dashboard(request)
            if body.enabled:
                dashboard.start_auto_refresh(body.interval)
            else:
                await dashboard.stop_auto_refresh()
            return _json({"auto_refresh": dashboard.auto_refresh_enabled})
        except Exception as exc:
            logger.exception("auto_refresh failed")
            return _error(exc)

    @app.get("/reports")
    async def list_reports(request: Request):
        try:
            return _json({"reports": [asdict(r) for r in _dashboard(request).snapshot().reports]})
        except Exception as exc:
            logger.exception("list_reports failed")
            return _error(exc)

    @app.post("/reports")
    async def add_report(request: Request, report: ReportCreateModel):
        try:
            record = _dashboard(request).add_report(report.model_dump())
            return _json(asdict(record), status_code=201)
        except Exception as exc:
            logger.exception("add_report failed")
            return _error(exc)

    @app.get("/export/csv")
    async def export_csv(request: Request):
        try:
            rows = _dashboard(request).get_export_snapshot()
            return _attachment(users_to_csv(rows), "text/csv", export_filename(CSV_PREFIX, "csv"))
        except Exception as exc:
            logger.exception("export_csv failed")
            return _error(exc)

    @app.get("/export/report")
    async def export_report(request: Request):
        try:
            rows = _dashboard(request).get_export_snapshot()
            text = users_to_report(rows, title=settings.report_title)
            return _attachment(text, "text/plain", export_filename(REPORT_PREFIX, "txt"))
        except Exception as exc:
            logger.exception("export_report failed")
            return _error(exc)

    return app


app = create_app()
