from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Mapping, Optional, Tuple

from core.config import TICKET_COLUMNS


def _clean(value: object) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class TicketRecord:
    """One row of the ticket export.

    Values are kept as sourced (strings). ``resolved`` is ``None`` when the
    column is missing or blank. ``source`` holds the full parsed row in its
    original column order so exports keep columns the dashboard does not use.
    """

    ticket_id: str = ""
    created: str = ""
    customer_email: str = ""
    category: str = ""
    assigned_team: str = ""
    priority: str = ""
    status: str = ""
    resolved: Optional[str] = None
    source: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> "TicketRecord":
        values = {attr: _clean(row.get(col)) for col, attr in TICKET_COLUMNS.items()}
        resolved = values.pop("resolved")
        return cls(
            **values,
            resolved=resolved if resolved.strip() else None,
            source={str(k): _clean(v) for k, v in row.items()},
        )

    def to_row(self) -> Dict[str, str]:
        if self.source:
            return dict(self.source)
        row = {col: getattr(self, attr) for col, attr in TICKET_COLUMNS.items()}
        row["Date Resolved"] = self.resolved or ""
        return row


@dataclass(frozen=True)
class CachedSnapshot:
    records: Tuple[TicketRecord, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class KPISummary:
    total_tickets: int = 0
    pending_tickets: int = 0
    completed_tickets: int = 0
    avg_resolution_time: float = 0.0


@dataclass(frozen=True)
class GroupCount:
    label: str
    count: int


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: date
    tickets: int
    cumulative: int


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: str = "default"
