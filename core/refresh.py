from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Deque, List, Optional, Sequence, Tuple

from core.cache import Clock, TicketCache, utcnow
from core.config import MAX_NOTICES, REFRESH_INTERVAL
from core.errors import EmptyResultError
from core.metrics import compute_kpis, compute_time_series, group_by_status, group_by_team
from core.models import GroupCount, KPISummary, Notice, TicketRecord, TimeSeriesPoint


logger = logging.getLogger(__name__)

NO_DATA_NOTICE = Notice(
    title="No data available",
    description="Unable to fetch ticket data. Please try again later.",
    variant="destructive",
)
LOAD_ERROR_NOTICE = Notice(
    title="Error loading data",
    description="Failed to fetch the latest data. Please try again.",
    variant="destructive",
)


@dataclass(frozen=True)
class DashboardState:
    records: Tuple[TicketRecord, ...] = ()
    kpis: Optional[KPISummary] = None
    team: Tuple[GroupCount, ...] = ()
    status: Tuple[GroupCount, ...] = ()
    time_series: Tuple[TimeSeriesPoint, ...] = ()
    last_updated: Optional[datetime] = None
    fetched_at: Optional[datetime] = None


def build_state(
    records: Sequence[TicketRecord],
    *,
    last_updated: Optional[datetime] = None,
    fetched_at: Optional[datetime] = None,
) -> DashboardState:
    records = tuple(records)
    return DashboardState(
        records=records,
        kpis=compute_kpis(records),
        team=tuple(group_by_team(records)),
        status=tuple(group_by_status(records)),
        time_series=tuple(compute_time_series(records)),
        last_updated=last_updated,
        fetched_at=fetched_at,
    )


def refreshed_notice(count: int) -> Notice:
    return Notice(title="Data refreshed", description=f"Updated with {count} tickets")


class DashboardService:
    """Turns cache reads into the state the UI renders, plus user notices."""

    def __init__(self, cache: TicketCache, *, clock: Clock = utcnow, max_notices: int = MAX_NOTICES):
        self.cache = cache
        self._clock = clock
        self._lock = threading.Lock()
        self._state = DashboardState()
        self._notices: Deque[Notice] = deque(maxlen=max_notices)

    @property
    def state(self) -> DashboardState:
        with self._lock:
            return self._state

    def load(self, *, announce: bool = False) -> DashboardState:
        read = self.cache.get()

        if not read.records or isinstance(read.error, EmptyResultError):
            self._notify(NO_DATA_NOTICE)
            return self.state

        if read.error is not None:
            self._notify(LOAD_ERROR_NOTICE)

        # Same snapshot as the current state: only an announced load that
        # succeeded moves last_updated.
        current = self.state
        same = read.records is current.records and read.fetched_at == current.fetched_at
        if same and (read.error is not None or not announce):
            return current

        state = build_state(read.records, last_updated=self._clock(), fetched_at=read.fetched_at)
        with self._lock:
            self._state = state
        if announce:
            self._notify(refreshed_notice(len(state.records)))
        return state

    def refresh(self) -> DashboardState:
        self.cache.invalidate()
        return self.load(announce=True)

    def drain_notices(self) -> List[Notice]:
        with self._lock:
            out = list(self._notices)
            self._notices.clear()
        return out

    def _notify(self, notice: Notice) -> None:
        logger.info("Notice: %s - %s", notice.title, notice.description)
        with self._lock:
            self._notices.append(notice)


class RefreshScheduler:
    def __init__(self, service: DashboardService, *, interval: timedelta = REFRESH_INTERVAL):
        self.service = service
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ticket-refresh", daemon=True)
        self._thread.start()
        logger.info("Ticket refresh scheduled every %s", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def trigger(self) -> DashboardState:
        return self.service.refresh()

    def _run(self) -> None:
        self._cycle(announce=False)
        while not self._stop.wait(self.interval.total_seconds()):
            self._cycle(announce=True)

    def _cycle(self, *, announce: bool) -> None:
        try:
            self.service.load(announce=announce)
        except Exception:
            logger.exception("Scheduled ticket refresh failed")
