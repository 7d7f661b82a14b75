from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.models import TicketRecord


ALL = "all"


@dataclass(frozen=True)
class TicketFilters:
    search: str = ""
    status: str = ALL
    team: str = ALL


def _choice(value: Optional[object]) -> str:
    s = str(value).strip() if value is not None else ""
    if not s or s.lower() == ALL:
        return ALL
    return s


def normalize_filters(raw: Optional[dict]) -> TicketFilters:
    raw = raw or {}
    search = (raw.get("search") or "").strip()
    return TicketFilters(search=search, status=_choice(raw.get("status")), team=_choice(raw.get("team")))


def matches(record: TicketRecord, filters: TicketFilters) -> bool:
    if filters.search:
        q = filters.search.lower()
        haystack = (record.ticket_id, record.customer_email, record.category)
        if not any(q in (v or "").lower() for v in haystack):
            return False
    if filters.status != ALL and record.status != filters.status:
        return False
    if filters.team != ALL and record.assigned_team != filters.team:
        return False
    return True


def filter_records(records: Iterable[TicketRecord], filters: TicketFilters) -> List[TicketRecord]:
    return [r for r in records if matches(r, filters)]


def _unique(values: Iterable[str]) -> List[str]:
    out: List[str] = []
    seen = set()
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


def unique_statuses(records: Iterable[TicketRecord]) -> List[str]:
    return _unique(r.status for r in records)


def unique_teams(records: Iterable[TicketRecord]) -> List[str]:
    return _unique(r.assigned_team for r in records)
