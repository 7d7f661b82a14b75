"""In-process snapshot cache for the ticket export.

The cache owns a single ``CachedSnapshot``. Reads inside the freshness window
are served from memory; older or missing snapshots trigger a fetch. At most one
fetch runs at a time: callers that arrive while a fetch is in flight wait for it
and share its result.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Tuple

from core.config import CACHE_TTL
from core.data import load_tickets
from core.errors import DashboardError, EmptyResultError, FetchError, ParseError
from core.models import CachedSnapshot, TicketRecord


logger = logging.getLogger(__name__)

Fetcher = Callable[[], Iterable[TicketRecord]]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheRead:
    records: Tuple[TicketRecord, ...] = ()
    fetched_at: Optional[datetime] = None
    from_cache: bool = False
    error: Optional[DashboardError] = None


class _Flight:
    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Optional[CacheRead] = None
        self.error: Optional[BaseException] = None


class TicketCache:
    def __init__(self, fetcher: Fetcher = load_tickets, *, ttl: timedelta = CACHE_TTL, clock: Clock = utcnow):
        self._fetcher = fetcher
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[CachedSnapshot] = None
        self._flight: Optional[_Flight] = None

    @property
    def snapshot(self) -> Optional[CachedSnapshot]:
        with self._lock:
            return self._snapshot

    def is_fresh(self, snapshot: Optional[CachedSnapshot]) -> bool:
        if snapshot is None:
            return False
        return self._clock() - snapshot.fetched_at < self.ttl

    def get(self) -> CacheRead:
        with self._lock:
            snapshot = self._snapshot
            if self.is_fresh(snapshot):
                return CacheRead(records=snapshot.records, fetched_at=snapshot.fetched_at, from_cache=True)
            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()

        if not leader:
            logger.debug("Joining in-flight ticket fetch")
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.result

        try:
            result = self._fetch()
        except BaseException as exc:
            flight.error = exc
            raise
        else:
            flight.result = result
            return result
        finally:
            with self._lock:
                self._flight = None
            flight.done.set()

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None
        logger.debug("Ticket cache invalidated")

    def _fetch(self) -> CacheRead:
        started = self._clock()
        try:
            records = tuple(self._fetcher())
        except (FetchError, ParseError) as exc:
            return self._fallback(exc)

        # An empty export never replaces a snapshot that has data.
        if not records:
            return self._fallback(EmptyResultError("Ticket export returned no rows"))

        snapshot = CachedSnapshot(records=records, fetched_at=started)
        with self._lock:
            self._snapshot = snapshot
        logger.info("Cached %d tickets fetched at %s", len(records), started.isoformat())
        return CacheRead(records=snapshot.records, fetched_at=snapshot.fetched_at, from_cache=False)

    def _fallback(self, error: DashboardError) -> CacheRead:
        snapshot = self.snapshot
        if snapshot is None:
            logger.warning("%s with no cached snapshot: %s", type(error).__name__, error)
            return CacheRead(error=error)
        logger.warning(
            "%s, serving %d cached tickets from %s: %s",
            type(error).__name__,
            len(snapshot.records),
            snapshot.fetched_at.isoformat(),
            error,
        )
        return CacheRead(records=snapshot.records, fetched_at=snapshot.fetched_at, from_cache=True, error=error)
