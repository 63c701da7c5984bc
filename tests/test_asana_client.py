from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta

import httpx
import pytest

from progress_tracker.asana import (
    AsanaClient,
    RateLimiter,
    SourceRateLimitedError,
    SourceUnavailableError,
)
from progress_tracker.asana.utils import chunk_date_range, dedupe_tasks
from progress_tracker.models import Task

BASE_URL = "https://asana.test/api/1.0"


def api_task(gid: str, name: str = "Task", **extra) -> dict:
    return {"gid": gid, "name": name, "completed_at": "2026-01-05T12:00:00.000Z", **extra}


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_client(handler, *, sleep=None, **kwargs) -> AsanaClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return AsanaClient(
        "secret-token",
        workspace_id="ws-1",
        project_id="proj-1",
        http_client=http,
        sleep=sleep or SleepRecorder(),
        **kwargs,
    )


def test_completed_search_is_chunked_and_deduplicated() -> None:
    requests: list[httpx.Request] = []
    pages = {
        "2026-01-01": [api_task("1"), api_task("2")],
        "2026-01-07": [api_task("2"), api_task("3")],
        "2026-01-13": [api_task("4"), api_task("5")],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        after = request.url.params["completed_on.after"]
        return httpx.Response(200, json={"data": pages[after]})

    async def run() -> list[Task]:
        async with make_client(handler, chunk_days=7) as client:
            return await client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 20))

    tasks = asyncio.run(run())

    assert [task.gid for task in tasks] == ["1", "2", "3", "4", "5"]
    assert len(requests) == 3
    first = requests[0]
    assert first.url.path == "/api/1.0/workspaces/ws-1/tasks/search"
    assert first.headers["Authorization"] == "Bearer secret-token"
    assert first.url.params["projects.any"] == "proj-1"
    assert first.url.params["completed"] == "true"
    assert first.url.params["limit"] == "100"
    assert "followers.name" in first.url.params["opt_fields"]
    assert [(r.url.params["completed_on.after"], r.url.params["completed_on.before"]) for r in requests] == [
        ("2026-01-01", "2026-01-08"),
        ("2026-01-07", "2026-01-14"),
        ("2026-01-13", "2026-01-20"),
    ]


def test_short_range_is_a_single_request() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"data": []})

    client = make_client(handler, chunk_days=7)
    tasks = asyncio.run(client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 6)))

    assert tasks == []
    assert len(calls) == 1


def test_rate_limited_request_is_retried_after_header_delay() -> None:
    sleep = SleepRecorder()
    responses = iter(
        [
            httpx.Response(429, headers={"Retry-After": "3"}),
            httpx.Response(200, json={"data": [api_task("9")]}),
        ]
    )

    client = make_client(lambda request: next(responses), sleep=sleep)
    tasks = asyncio.run(client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 3)))

    assert [task.gid for task in tasks] == ["9"]
    assert sleep.calls == [3.0]


def test_persistent_rate_limit_raises_after_retries() -> None:
    sleep = SleepRecorder()
    client = make_client(
        lambda request: httpx.Response(429),
        sleep=sleep,
        max_rate_limit_retries=1,
    )

    with pytest.raises(SourceRateLimitedError) as excinfo:
        asyncio.run(client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 3)))

    assert excinfo.value.retry_after == 60.0
    assert sleep.calls == [60.0]


def test_server_error_is_unavailable() -> None:
    client = make_client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(SourceUnavailableError, match="HTTP 500"):
        asyncio.run(client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 3)))


def test_transport_error_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(SourceUnavailableError):
        asyncio.run(client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 3)))


def test_open_search_parameters() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"data": [{"gid": "7", "name": "Draft docs", "created_at": "2026-01-02T00:00:00Z", "due_on": "2026-02-01"}]},
        )

    client = make_client(handler)
    tasks = asyncio.run(client.search_open_tasks(["11", "22"]))

    assert tasks[0].due_on == "2026-02-01"
    params = seen[0].url.params
    assert params["completed"] == "false"
    assert params["tags.any"] == "11,22"
    assert "due_on" in params["opt_fields"]


def test_open_search_without_tags_makes_no_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = make_client(handler)

    assert asyncio.run(client.search_open_tasks([])) == []


def test_task_from_api_payload() -> None:
    task = Task.from_api(
        {
            "gid": 42,
            "name": "Blog post",
            "completed_at": "2026-01-05T12:00:00.000Z",
            "tags": [{"gid": "1", "name": "blog"}, {"gid": "1", "name": "blog"}, {"gid": "2", "name": "goose"}],
            "assignee": None,
            "followers": [{"name": "Ana"}, {"gid": "x"}],
        }
    )

    assert task.gid == "42"
    assert task.tag_names == ["blog", "goose"]
    assert task.assignee is None
    assert task.followers == ("Ana",)


def test_rate_limiter_waits_when_budget_exhausted() -> None:
    now = [0.0]
    sleep = SleepRecorder()
    limiter = RateLimiter(2, 60.0, clock=lambda: now[0], sleep=sleep)

    async def run() -> None:
        await limiter.acquire()
        now[0] = 10.0
        await limiter.acquire()
        await limiter.acquire()

    asyncio.run(run())

    assert sleep.calls == [50.0]
    assert limiter.status()["requests_in_window"] == 1


def test_rate_limiter_resets_after_window() -> None:
    now = [0.0]
    sleep = SleepRecorder()
    limiter = RateLimiter(1, 60.0, clock=lambda: now[0], sleep=sleep)

    async def run() -> None:
        await limiter.acquire()
        now[0] = 61.0
        await limiter.acquire()

    asyncio.run(run())

    assert sleep.calls == []


def test_chunks_cover_every_day() -> None:
    start, end = date(2025, 12, 31), date(2026, 4, 1)

    chunks = chunk_date_range(start, end, 7)

    covered = set()
    for after, before in chunks:
        day = after + timedelta(days=1)
        while day < before:
            covered.add(day)
            day += timedelta(days=1)
    expected = {start + timedelta(days=offset) for offset in range(1, (end - start).days)}
    assert covered == expected
    assert chunks[0][0] == start
    assert chunks[-1][1] == end


def test_dedupe_keeps_first_occurrence() -> None:
    tasks = [Task("1", "first"), Task("2", "b"), Task("1", "second")]

    assert [task.name for task in dedupe_tasks(tasks)] == ["first", "b"]


def test_rate_limiter_budget_holds_under_concurrency() -> None:
    now = [0.0]
    stamps: list[float] = []

    async def advance(seconds: float) -> None:
        now[0] += seconds
        await asyncio.sleep(0)

    limiter = RateLimiter(2, 60.0, clock=lambda: now[0], sleep=advance)

    async def worker() -> None:
        for _ in range(4):
            await limiter.acquire()
            stamps.append(now[0])
            await asyncio.sleep(0)

    async def run() -> None:
        await asyncio.gather(worker(), worker(), worker())

    asyncio.run(run())

    assert len(stamps) == 12
    busiest = max(sum(1 for other in stamps if start <= other < start + 60.0) for start in stamps)
    assert busiest <= 2


def test_full_result_page_logs_truncation_warning(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="progress_tracker.asana.client")
    page = [api_task(str(index)) for index in range(100)]
    client = make_client(lambda request: httpx.Response(200, json={"data": page}))

    tasks = asyncio.run(client.search_completed_tasks(date(2026, 1, 1), date(2026, 1, 3)))

    assert len(tasks) == 100
    assert any("result limit" in record.getMessage() for record in caplog.records)
