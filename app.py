import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from core.cache import TicketCache
from core.charts import status_chart, team_chart, time_series_chart
from core.config import DASHBOARD_URL, REFRESH_INTERVAL
from core.export import export_filename, records_to_csv, records_to_frame, share_payload
from core.filters import ALL, filter_records, normalize_filters, unique_statuses, unique_teams
from core.metrics_overview import format_last_updated
from core.models import Notice, TicketRecord
from core.refresh import DashboardService, DashboardState, RefreshScheduler

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
alt.data_transformers.disable_max_rows()

TABLE_COLUMNS = {
    "Ticket ID": "Ticket ID",
    "Customer Email": "Customer",
    "Category (Auto)": "Category",
    "Assigned Team": "Team",
    "Priority": "Priority",
    "Status": "Status",
    "Date Created": "Created",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .subtitle {color: #6b7280;font-size: 0.9rem;margin-top: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #2563eb;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


@st.cache_resource
def get_scheduler() -> RefreshScheduler:
    scheduler = RefreshScheduler(DashboardService(TicketCache()))
    scheduler.start()
    return scheduler


def show_notices(notices: List[Notice]):
    for notice in notices:
        icon = "⚠️" if notice.variant == "destructive" else "✅"
        st.toast(f"**{notice.title}**: {notice.description}", icon=icon)


def render_header(state: DashboardState, scheduler: RefreshScheduler):
    inject_base_styles()
    c1, c2 = st.columns([6, 4])
    with c1:
        st.markdown(
            "<div class='app-top-bar'><div class='page-title'>Support Dashboard</div>"
            "<div class='subtitle'>Real-time ticket management and analytics</div></div>",
            unsafe_allow_html=True,
        )
        if state.last_updated is not None:
            updated = format_last_updated(state.last_updated, datetime.now(timezone.utc))
            hours = int(REFRESH_INTERVAL.total_seconds() // 3600)
            st.markdown(
                f"<div class='chip-row'><span class='chip'>Last updated: {updated}</span>"
                f"<span class='chip'>Auto-refresh: {hours}h</span></div>",
                unsafe_allow_html=True,
            )
    with c2:
        btn_cols = st.columns(3)
        if btn_cols[0].button("Refresh"):
            scheduler.trigger()
            st.rerun()
        if state.records:
            btn_cols[1].download_button(
                "Export",
                data=records_to_csv(state.records),
                file_name=export_filename(),
                mime="text/csv",
            )
        with btn_cols[2].popover("Share"):
            payload = share_payload(DASHBOARD_URL)
            st.caption(payload["text"])
            st.code(payload["url"], language=None)


def render_kpi_tiles(state: DashboardState):
    kpis = state.kpis
    if kpis is None:
        return
    cols = st.columns(4)
    cols[0].metric("Total Tickets", f"{kpis.total_tickets:,}")
    cols[1].metric("Pending Tickets", f"{kpis.pending_tickets:,}", help="Tickets whose status is not Resolved.")
    cols[2].metric("Completed Tickets", f"{kpis.completed_tickets:,}")
    cols[3].metric(
        "Avg Resolution Time",
        f"{kpis.avg_resolution_time} days",
        help="Mean of (Date Resolved - Date Created) over resolved tickets with both dates.",
    )


def render_charts(state: DashboardState):
    if not state.team or not state.status:
        return
    left, right = st.columns(2)
    with left:
        with card("Tickets by Team"):
            st.altair_chart(team_chart(state.team), use_container_width=True)
    with right:
        with card("Tickets by Status"):
            st.altair_chart(status_chart(state.status), use_container_width=True)
    with card("Ticket Volume Over Time", actions="daily / cumulative"):
        st.altair_chart(time_series_chart(state.time_series), use_container_width=True)


def _table_frame(records: List[TicketRecord]) -> pd.DataFrame:
    df = records_to_frame(records)
    for col in TABLE_COLUMNS:
        if col not in df.columns:
            df[col] = ""
    df = df[list(TABLE_COLUMNS)].rename(columns=TABLE_COLUMNS)
    created = pd.to_datetime(df["Created"], errors="coerce", utc=True, format="mixed")
    df["Created"] = created.dt.strftime("%Y-%m-%d").fillna(df["Created"])
    return df


def render_table(state: DashboardState):
    records = list(state.records)
    with card("Tickets Overview"):
        f1, f2, f3 = st.columns([4, 2, 2])
        search = f1.text_input("Search tickets, emails, or categories...", "")
        status = f2.selectbox("Status", [ALL] + unique_statuses(records), format_func=lambda s: "All Statuses" if s == ALL else s)
        team = f3.selectbox("Team", [ALL] + unique_teams(records), format_func=lambda s: "All Teams" if s == ALL else s)

        filters = normalize_filters({"search": search, "status": status, "team": team})
        rows = filter_records(records, filters)
        st.caption(f"Showing {len(rows)} of {len(records)} tickets")
        if not rows:
            st.info("No tickets match your current filters.")
            return
        st.dataframe(_table_frame(rows), use_container_width=True, hide_index=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Support Dashboard", layout="wide")
inject_base_styles()

scheduler = get_scheduler()
service = scheduler.service
with st.spinner("Loading dashboard data..."):
    dashboard_state = service.load()
show_notices(service.drain_notices())

render_header(dashboard_state, scheduler)
if not dashboard_state.records:
    st.error("No ticket data available yet. Use Refresh to try again.")
    st.stop()

render_kpi_tiles(dashboard_state)
render_charts(dashboard_state)
render_table(dashboard_state)
