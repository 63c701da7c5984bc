"""In-memory progress cache keyed by period identifier."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable

from ..goals.periods import is_period_past
from .models import CacheEntry

logger = logging.getLogger(__name__)


class ProgressCache:
    """Memoize computed payloads per period.

    Entries for closed periods (end boundary strictly before now at store
    time) never expire. Entries for the open period expire ``ttl`` after
    they were stored. All operations are guarded by a single lock.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(minutes=5),
        period_end: Callable[[str], date | None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl = ttl
        self._period_end = period_end or (lambda _period_id: None)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _is_past(self, period_id: str, now: datetime) -> bool:
        end = self._period_end(period_id)
        return end is not None and is_period_past(end, now)

    def _is_valid(self, entry: CacheEntry, now: datetime) -> bool:
        if entry.is_past:
            return True
        return now - entry.created_at < self._ttl

    def get(self, period_id: str) -> dict[str, Any] | None:
        entry = self.get_entry(period_id)
        return entry.payload if entry is not None else None

    def get_entry(self, period_id: str) -> CacheEntry | None:
        """Return the live entry for ``period_id``, evicting it if expired."""

        now = self._clock()
        with self._lock:
            entry = self._entries.get(period_id)
            if entry is None:
                return None
            if self._is_valid(entry, now):
                logger.debug("Cache hit", extra={"period_id": period_id})
                return entry
            del self._entries[period_id]
        logger.info("Cache expired", extra={"period_id": period_id})
        return None

    def put(self, period_id: str, payload: dict[str, Any]) -> CacheEntry:
        now = self._clock()
        entry = CacheEntry(
            period_id=period_id,
            payload=payload,
            created_at=now,
            is_past=self._is_past(period_id, now),
        )
        with self._lock:
            self._entries[period_id] = entry
        logger.info(
            "Cached progress",
            extra={"period_id": period_id, "permanent": entry.is_past},
        )
        return entry

    def invalidate(self, period_id: str) -> bool:
        """Remove ``period_id`` regardless of closed or open status."""

        with self._lock:
            removed = self._entries.pop(period_id, None) is not None
        if removed:
            logger.info("Cache cleared", extra={"period_id": period_id})
        return removed

    def age(self, entry: CacheEntry) -> float:
        return (self._clock() - entry.created_at).total_seconds()

    def status(self) -> dict[str, dict[str, Any]]:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        summary: dict[str, dict[str, Any]] = {}
        for entry in entries:
            age = (now - entry.created_at).total_seconds()
            summary[entry.period_id] = {
                "is_past": entry.is_past,
                "age_seconds": round(age, 3),
                "expires_in_seconds": (
                    None if entry.is_past else max(0.0, round(self._ttl.total_seconds() - age, 3))
                ),
            }
        return summary


__all__ = ["ProgressCache"]
