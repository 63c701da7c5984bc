"""Async client for Asana's task search endpoint."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, Protocol, Sequence

import httpx

from ..config import TrackerSettings
from ..models import Task
from .utils import chunk_date_range, dedupe_tasks

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.asana.com/api/1.0"
DEFAULT_RETRY_AFTER = 60.0
SEARCH_LIMIT = 100

COMPLETED_FIELDS = ",".join(
    [
        "name",
        "completed_at",
        "tags",
        "tags.name",
        "tags.gid",
        "assignee",
        "assignee.name",
        "followers",
        "followers.name",
    ]
)
OPEN_FIELDS = ",".join(
    [
        "name",
        "created_at",
        "due_on",
        "tags",
        "tags.name",
        "tags.gid",
        "assignee",
        "assignee.name",
        "followers",
        "followers.name",
    ]
)

Sleep = Callable[[float], Awaitable[None]]


class AsanaClientError(RuntimeError):
    """Base class for task source errors."""


class SourceUnavailableError(AsanaClientError):
    """Raised on transport failures and non-2xx responses other than 429."""


class SourceRateLimitedError(AsanaClientError):
    """Raised when Asana keeps answering 429 after the allowed retries."""

    def __init__(self, message: str, *, retry_after: float) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TaskSource(Protocol):
    """The task queries the progress service consumes."""

    async def search_completed_tasks(self, start: date, end: date) -> list[Task]:
        ...

    async def search_open_tasks(self, tag_ids: Sequence[str]) -> list[Task]:
        ...


class RateLimiter:
    """Fixed-window request budget shared by all calls of one client.

    ``acquire`` is serialised, so concurrent callers queue behind a caller
    that is waiting for the window to reset instead of resetting it twice.
    """

    def __init__(
        self,
        max_requests: int = 50,
        window: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._max_requests = max_requests
        self._window = window
        self._clock = clock
        self._sleep = sleep
        self._window_start = clock()
        self._count = 0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = self._clock()
            if now - self._window_start >= self._window:
                self._window_start = now
                self._count = 0

            if self._count >= self._max_requests:
                wait = self._window - (now - self._window_start)
                logger.warning("Request budget exhausted, waiting", extra={"wait_seconds": round(wait, 3)})
                await self._sleep(wait)
                self._window_start = self._clock()
                self._count = 0

            self._count += 1

    def status(self) -> dict[str, Any]:
        elapsed = self._clock() - self._window_start
        return {
            "requests_in_window": self._count,
            "max_requests": self._max_requests,
            "window_reset_in_seconds": round(max(0.0, self._window - elapsed), 3),
        }


def _retry_after(response: httpx.Response) -> float:
    raw = response.headers.get("Retry-After")
    try:
        return float(raw) if raw is not None else DEFAULT_RETRY_AFTER
    except ValueError:
        return DEFAULT_RETRY_AFTER


class AsanaClient:
    """Search completed and open tasks of one Asana project."""

    def __init__(
        self,
        token: str,
        *,
        workspace_id: str,
        project_id: str,
        base_url: str = DEFAULT_BASE_URL,
        chunk_days: int = 7,
        max_rate_limit_retries: int = 5,
        rate_limiter: RateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._workspace_id = workspace_id
        self._project_id = project_id
        self._chunk_days = chunk_days
        self._max_rate_limit_retries = max_rate_limit_retries
        self._rate_limiter = rate_limiter or RateLimiter()
        self._sleep = sleep
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=30.0)
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: TrackerSettings) -> "AsanaClient":
        if not settings.asana_token:
            raise ValueError("ASANA_TOKEN is required to build an Asana client")
        return cls(
            settings.asana_token,
            workspace_id=settings.asana_workspace_id,
            project_id=settings.asana_project_id,
            base_url=settings.asana_base_url,
            chunk_days=settings.chunk_days,
            max_rate_limit_retries=settings.max_rate_limit_retries,
            rate_limiter=RateLimiter(
                settings.rate_limit_requests, settings.rate_limit_window_seconds
            ),
        )

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def _search_path(self) -> str:
        return f"/workspaces/{self._workspace_id}/tasks/search"

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        retries = 0
        while True:
            await self._rate_limiter.acquire()
            try:
                response = await self._http.get(path, params=params, headers=self._headers)
            except httpx.HTTPError as exc:
                raise SourceUnavailableError(f"Asana request to {path} failed: {exc}") from exc

            if response.status_code == 429:
                retry_after = _retry_after(response)
                if retries >= self._max_rate_limit_retries:
                    raise SourceRateLimitedError(
                        f"Asana rate limit persisted after {retries} retries",
                        retry_after=retry_after,
                    )
                retries += 1
                logger.warning(
                    "Rate limited by Asana, retrying",
                    extra={"retry_after": retry_after, "attempt": retries},
                )
                await self._sleep(retry_after)
                continue

            if response.is_error:
                raise SourceUnavailableError(
                    f"Asana returned HTTP {response.status_code} for {path}: {response.text[:200]}"
                )

            try:
                return response.json()
            except ValueError as exc:
                raise SourceUnavailableError(f"Asana returned invalid JSON for {path}") from exc

    async def _search(self, params: dict[str, Any]) -> list[Task]:
        query = {"projects.any": self._project_id, "limit": SEARCH_LIMIT, **params}
        body = await self._get(self._search_path, query)
        tasks = [Task.from_api(item) for item in body.get("data") or []]
        if len(tasks) >= SEARCH_LIMIT:
            logger.warning(
                "Search returned the result limit; results may be truncated, lower TRACKER_CHUNK_DAYS",
                extra={"count": len(tasks), "limit": SEARCH_LIMIT},
            )
        return tasks

    async def search_completed_tasks(self, start: date, end: date) -> list[Task]:
        """Return tasks completed strictly between ``start`` and ``end``."""

        chunks = chunk_date_range(start, end, self._chunk_days)
        if len(chunks) > 1:
            logger.info(
                "Splitting completed-task search",
                extra={"start": start.isoformat(), "end": end.isoformat(), "chunks": len(chunks)},
            )

        collected: list[Task] = []
        for after, before in chunks:
            tasks = await self._search(
                {
                    "completed": "true",
                    "completed_on.after": after.isoformat(),
                    "completed_on.before": before.isoformat(),
                    "opt_fields": COMPLETED_FIELDS,
                }
            )
            logger.debug(
                "Fetched search chunk",
                extra={"after": after.isoformat(), "before": before.isoformat(), "count": len(tasks)},
            )
            collected.extend(tasks)

        unique = dedupe_tasks(collected)
        logger.info(
            "Fetched completed tasks",
            extra={"start": start.isoformat(), "end": end.isoformat(), "count": len(unique)},
        )
        return unique

    async def search_open_tasks(self, tag_ids: Sequence[str]) -> list[Task]:
        """Return incomplete tasks carrying any of ``tag_ids``."""

        if not tag_ids:
            return []
        return await self._search(
            {
                "completed": "false",
                "tags.any": ",".join(tag_ids),
                "opt_fields": OPEN_FIELDS,
            }
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsanaClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class FakeTaskSource:
    """Test double serving tasks from memory and recording every query."""

    def __init__(
        self,
        completed: Iterable[Task] | None = None,
        open_tasks: Iterable[Task] | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self._completed = list(completed or [])
        self._open = list(open_tasks or [])
        self._error = error
        self.completed_calls: list[tuple[date, date]] = []
        self.open_calls: list[tuple[str, ...]] = []

    async def search_completed_tasks(self, start: date, end: date) -> list[Task]:
        self.completed_calls.append((start, end))
        if self._error is not None:
            raise self._error
        results = []
        for task in self._completed:
            if task.completed_at:
                day = date.fromisoformat(task.completed_at[:10])
                if not start < day < end:
                    continue
            results.append(task)
        return results

    async def search_open_tasks(self, tag_ids: Sequence[str]) -> list[Task]:
        self.open_calls.append(tuple(tag_ids))
        if self._error is not None:
            raise self._error
        wanted = set(tag_ids)
        return [task for task in self._open if any(tag.gid in wanted for tag in task.tags)]


__all__ = [
    "AsanaClient",
    "AsanaClientError",
    "FakeTaskSource",
    "RateLimiter",
    "SourceRateLimitedError",
    "SourceUnavailableError",
    "TaskSource",
]
