from __future__ import annotations

import logging
from typing import Iterable, List

import pandas as pd

from core.config import RESOLVED_STATUS, TICKET_COLUMNS, UNASSIGNED_TEAM, UNKNOWN_STATUS
from core.data import round_half_up
from core.models import GroupCount, KPISummary, TicketRecord, TimeSeriesPoint


logger = logging.getLogger(__name__)

FRAME_COLUMNS = list(TICKET_COLUMNS.values())
MS_PER_DAY = 86_400_000


def records_frame(records: Iterable[TicketRecord]) -> pd.DataFrame:
    rows = [{col: getattr(r, col) for col in FRAME_COLUMNS} for r in records]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def parse_timestamps(values: pd.Series) -> pd.Series:
    """ISO strings -> UTC timestamps. Naive values are read as UTC; junk -> NaT."""
    return pd.to_datetime(values, errors="coerce", utc=True, format="mixed")


def resolved_mask(df: pd.DataFrame) -> pd.Series:
    return df["status"].fillna("").astype(str).str.strip().str.lower().eq(RESOLVED_STATUS)


def _resolution_days(df: pd.DataFrame) -> pd.Series:
    created = parse_timestamps(df["created"])
    resolved = parse_timestamps(df["resolved"])
    days = (resolved - created).dt.total_seconds() * 1000 / MS_PER_DAY
    return days[days.notna() & (days >= 0)]


def compute_kpis(records: Iterable[TicketRecord]) -> KPISummary:
    df = records_frame(records)
    if df.empty:
        return KPISummary()

    mask = resolved_mask(df)
    total = int(len(df))
    completed = int(mask.sum())

    avg_days = 0.0
    done = df[mask]
    if not done.empty:
        days = _resolution_days(done)
        if not days.empty:
            avg_days = round_half_up(days.mean(), 1)

    return KPISummary(
        total_tickets=total,
        pending_tickets=total - completed,
        completed_tickets=completed,
        avg_resolution_time=avg_days,
    )


def _group_counts(df: pd.DataFrame, column: str, sentinel: str) -> List[GroupCount]:
    if df.empty:
        return []
    labels = df[column].fillna("").astype(str)
    labels = labels.where(labels.str.strip() != "", sentinel)
    counts = labels.groupby(labels, sort=False).size()
    return [GroupCount(label=str(label), count=int(n)) for label, n in counts.items()]


def group_by_team(records: Iterable[TicketRecord]) -> List[GroupCount]:
    return _group_counts(records_frame(records), "assigned_team", UNASSIGNED_TEAM)


def group_by_status(records: Iterable[TicketRecord]) -> List[GroupCount]:
    return _group_counts(records_frame(records), "status", UNKNOWN_STATUS)


def compute_time_series(records: Iterable[TicketRecord]) -> List[TimeSeriesPoint]:
    """Tickets created per UTC calendar day, ascending, with a running total.

    Only days present in the data appear. Rows without a parseable creation
    timestamp are left out.
    """
    df = records_frame(records)
    if df.empty:
        return []
    created = parse_timestamps(df["created"])
    dropped = int(created.isna().sum())
    if dropped:
        logger.debug("Time series skipped %d tickets with no parseable creation date", dropped)
    created = created.dropna()
    if created.empty:
        return []

    days = created.dt.date
    daily = days.groupby(days).size().sort_index()
    cumulative = daily.cumsum()
    return [
        TimeSeriesPoint(date=day, tickets=int(n), cumulative=int(c))
        for day, n, c in zip(daily.index, daily.tolist(), cumulative.tolist())
    ]
