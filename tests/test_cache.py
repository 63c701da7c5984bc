from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone

from progress_tracker.storage import ProgressCache

PERIOD_ENDS = {
    "2025-Q4": date(2026, 1, 1),
    "2026-Q4": date(2027, 1, 1),
}


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_cache(clock: FakeClock) -> ProgressCache:
    return ProgressCache(ttl=timedelta(minutes=5), period_end=PERIOD_ENDS.get, clock=clock)


def test_past_period_never_expires() -> None:
    clock = FakeClock(datetime(2026, 10, 19, 12, tzinfo=timezone.utc))
    cache = make_cache(clock)
    payload = {"period_id": "2025-Q4"}

    entry = cache.put("2025-Q4", payload)
    clock.advance(days=30)

    assert entry.is_past
    assert cache.get("2025-Q4") is payload


def test_open_period_expires_after_ttl() -> None:
    clock = FakeClock(datetime(2026, 10, 19, 12, tzinfo=timezone.utc))
    cache = make_cache(clock)
    payload = {"period_id": "2026-Q4"}

    entry = cache.put("2026-Q4", payload)
    clock.advance(minutes=4)
    assert cache.get("2026-Q4") is payload

    clock.advance(minutes=1, seconds=1)
    assert not entry.is_past
    assert cache.get("2026-Q4") is None
    assert cache.status() == {}


def test_unknown_period_end_is_treated_as_open() -> None:
    clock = FakeClock(datetime(2026, 10, 19, 12, tzinfo=timezone.utc))
    cache = make_cache(clock)

    cache.put("adhoc", {})
    clock.advance(minutes=6)

    assert cache.get("adhoc") is None


def test_invalidate_removes_past_entries() -> None:
    clock = FakeClock(datetime(2026, 10, 19, 12, tzinfo=timezone.utc))
    cache = make_cache(clock)
    cache.put("2025-Q4", {"period_id": "2025-Q4"})

    assert cache.invalidate("2025-Q4") is True
    assert cache.get("2025-Q4") is None
    assert cache.invalidate("2025-Q4") is False


def test_status_reports_age_and_expiry() -> None:
    clock = FakeClock(datetime(2026, 10, 19, 12, tzinfo=timezone.utc))
    cache = make_cache(clock)
    cache.put("2025-Q4", {})
    cache.put("2026-Q4", {})
    clock.advance(seconds=60)

    status = cache.status()

    assert status["2025-Q4"] == {"is_past": True, "age_seconds": 60.0, "expires_in_seconds": None}
    assert status["2026-Q4"]["expires_in_seconds"] == 240.0


def test_concurrent_access_is_safe() -> None:
    cache = ProgressCache(period_end=PERIOD_ENDS.get)

    def worker(index: int) -> None:
        period_id = f"period-{index % 4}"
        cache.put(period_id, {"index": index})
        cache.get(period_id)
        if index % 3 == 0:
            cache.invalidate(period_id)
        cache.status()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(200)))

    assert set(cache.status()) <= {f"period-{index}" for index in range(4)}
