from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
from functools import lru_cache
import logging
import math

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import (
    KPIModel,
    MetaListResponse,
    NoticeModel,
    RefreshResponse,
    ShareResponse,
    TicketFiltersModel,
    TicketTableResponse,
)
from core.cache import TicketCache
from core.config import DASHBOARD_URL
from core.export import export_filename, records_to_csv, share_payload
from core.filters import TicketFilters, filter_records, normalize_filters, unique_statuses, unique_teams
from core.metrics_overview import compute_overview
from core.refresh import DashboardService, RefreshScheduler


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_service() -> DashboardService:
    return DashboardService(TicketCache())


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = RefreshScheduler(get_service())
    scheduler.start()
    try:
        yield
    finally:
        scheduler.stop(timeout=5)


app = FastAPI(title="Support Dashboard API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:8501", "http://127.0.0.1:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters(
    search: str = Query(default=""),
    status: str = Query(default="all"),
    team: str = Query(default="all"),
) -> TicketFilters:
    model = TicketFiltersModel(search=search, status=status, team=team)
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
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
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _notices(service: DashboardService) -> list:
    return [NoticeModel(**asdict(n)).model_dump() for n in service.drain_notices()]


@app.get("/overview")
def overview(filters: TicketFilters = Depends(_filters), service: DashboardService = Depends(get_service)):
    try:
        state = service.load()
        payload = compute_overview(state, filters)
        payload["notices"] = _notices(service)
        return _json(payload)
    except Exception as exc:
        return _error("overview", exc)


@app.get("/kpis")
def kpis(service: DashboardService = Depends(get_service)):
    try:
        state = service.load()
        model = KPIModel(**asdict(state.kpis)) if state.kpis is not None else KPIModel()
        return _json(model.model_dump())
    except Exception as exc:
        return _error("kpis", exc)


@app.get("/tickets")
def tickets(filters: TicketFilters = Depends(_filters), service: DashboardService = Depends(get_service)):
    try:
        records = service.load().records
        rows = filter_records(records, filters)
        table = TicketTableResponse(rows=[r.to_row() for r in rows], showing=len(rows), total=len(records))
        return _json(table.model_dump())
    except Exception as exc:
        return _error("tickets", exc)


@app.get("/meta/statuses")
def meta_statuses(service: DashboardService = Depends(get_service)):
    try:
        return _json(MetaListResponse(values=unique_statuses(service.load().records)).model_dump())
    except Exception as exc:
        return _error("meta_statuses", exc)


@app.get("/meta/teams")
def meta_teams(service: DashboardService = Depends(get_service)):
    try:
        return _json(MetaListResponse(values=unique_teams(service.load().records)).model_dump())
    except Exception as exc:
        return _error("meta_teams", exc)


@app.post("/refresh")
def refresh(service: DashboardService = Depends(get_service)):
    try:
        state = service.refresh()
        last_updated = state.last_updated.isoformat() if state.last_updated else None
        body = RefreshResponse(count=len(state.records), last_updated=last_updated, notices=_notices(service))
        return _json(body.model_dump())
    except Exception as exc:
        return _error("refresh", exc)


@app.get("/export")
def export(service: DashboardService = Depends(get_service)):
    try:
        records = service.load().records
        if not records:
            return Response(status_code=204)
        filename = export_filename()
        return Response(
            content=records_to_csv(records),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    except Exception as exc:
        return _error("export", exc)


@app.get("/share")
def share(url: str = Query(default=DASHBOARD_URL)):
    return _json(ShareResponse(**share_payload(url)).model_dump())
