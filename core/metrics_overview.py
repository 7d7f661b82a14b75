from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

from core.charts import status_chart, team_chart, time_series_chart, to_vega_spec
from core.filters import TicketFilters, filter_records, unique_statuses, unique_teams
from core.refresh import DashboardState


def format_last_updated(then: datetime, now: datetime) -> str:
    mins = int((now - then).total_seconds() // 60)
    if mins < 1:
        return "Just now"
    if mins < 60:
        return f"{mins}m ago"
    hours = mins // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def compute_overview(state: DashboardState, filters: TicketFilters) -> Dict[str, Any]:
    records = state.records
    rows = filter_records(records, filters)

    charts: Dict[str, Any] = {}
    if state.team and state.status:
        charts = {
            "team": to_vega_spec(team_chart(state.team)),
            "status": to_vega_spec(status_chart(state.status)),
            "time_series": to_vega_spec(time_series_chart(state.time_series)),
        }

    return {
        "filters": asdict(filters),
        "kpis": asdict(state.kpis) if state.kpis is not None else None,
        "team": [asdict(g) for g in state.team],
        "status": [asdict(g) for g in state.status],
        "time_series": [
            {"date": p.date.isoformat(), "tickets": p.tickets, "cumulative": p.cumulative} for p in state.time_series
        ],
        "charts": charts,
        "table": {
            "rows": [r.to_row() for r in rows],
            "showing": len(rows),
            "total": len(records),
        },
        "options": {"statuses": unique_statuses(records), "teams": unique_teams(records)},
        "last_updated": _iso(state.last_updated),
        "fetched_at": _iso(state.fetched_at),
    }
