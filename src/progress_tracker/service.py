"""Progress service exposed to the HTTP layer and the diagnostics CLI."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from .asana import AsanaClient, TaskSource
from .classification import DEFAULT_TAG_TABLE, TagTable
from .classification.tags import DOC, DOCUMENTATION
from .config import TrackerSettings
from .goals import GoalsConfig, PeriodConfig, current_quarter, load_goals, month_bounds
from .goals.periods import MONTH_NAMES
from .progress import ProgressAggregator, progress_as_dict
from .progress.aggregator import UNASSIGNED
from .storage import ProgressCache

logger = logging.getLogger(__name__)


class ProgressServiceError(RuntimeError):
    """Base class for errors surfaced to callers of the progress service."""


class ConfigurationMissingError(ProgressServiceError):
    """Raised when the Asana credential is not configured."""


class PeriodUnknownError(ProgressServiceError):
    """Raised when a period has no configuration; carries the known periods."""

    def __init__(self, message: str, *, available: list[dict[str, str]]) -> None:
        super().__init__(message)
        self.available = available


class ProgressService:
    """Compute, cache and serve goal progress per period."""

    def __init__(
        self,
        *,
        goals: GoalsConfig,
        source: TaskSource | None,
        cache: ProgressCache | None = None,
        cache_ttl: timedelta = timedelta(minutes=5),
        aggregator: ProgressAggregator | None = None,
        tag_table: TagTable = DEFAULT_TAG_TABLE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._goals = goals
        self._source = source
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._cache = cache or ProgressCache(ttl=cache_ttl, period_end=self._period_end, clock=self._clock)
        self._aggregator = aggregator or ProgressAggregator(
            excluded_contributors=goals.excluded_contributors
        )
        self._tag_table = tag_table

    @classmethod
    def from_settings(
        cls,
        settings: TrackerSettings,
        *,
        goals: GoalsConfig | None = None,
        source: TaskSource | None = None,
    ) -> "ProgressService":
        goals = goals or load_goals(settings.goals_path)
        if source is None and settings.asana_token:
            source = AsanaClient.from_settings(settings)
        return cls(
            goals=goals,
            source=source,
            cache_ttl=timedelta(seconds=settings.cache_ttl_seconds),
        )

    @property
    def goals(self) -> GoalsConfig:
        return self._goals

    @property
    def cache(self) -> ProgressCache:
        return self._cache

    @property
    def aggregator(self) -> ProgressAggregator:
        return self._aggregator

    @property
    def source(self) -> TaskSource | None:
        return self._source

    def _period_end(self, period_id: str):
        period = self._goals.get(period_id)
        return period.end_date if period is not None else None

    def _require_source(self) -> TaskSource:
        if self._source is None:
            raise ConfigurationMissingError(
                "ASANA_TOKEN not configured. Please add it to your environment or .env file."
            )
        return self._source

    def _require_period(self, period_id: str, *, with_goals: bool = True) -> PeriodConfig:
        period = self._goals.get(period_id)
        if period is None or (with_goals and period.goals is None):
            raise PeriodUnknownError(
                f"Quarter {period_id} not found in configuration",
                available=self._goals.available(),
            )
        return period

    def current_period(self) -> str:
        return current_quarter(self._clock().date())

    def list_periods(self) -> dict[str, Any]:
        return {"quarters": self._goals.available(), "current": self.current_period()}

    async def get_progress(self, period_id: str) -> dict[str, Any]:
        source = self._require_source()
        period = self._require_period(period_id)

        entry = self._cache.get_entry(period_id)
        if entry is not None:
            return {**entry.payload, "cached": True, "cache_age": self._cache.age(entry)}

        payload = await self._compute(period, source)
        self._cache.put(period_id, payload)
        return {**payload, "cached": False}

    async def refresh(self, period_id: str) -> dict[str, Any]:
        """Drop the cached payload for ``period_id`` and recompute it."""

        source = self._require_source()
        period = self._require_period(period_id)
        self._cache.invalidate(period_id)
        payload = await self._compute(period, source)
        self._cache.put(period_id, payload)
        return {"message": f"Cache refreshed for {period_id}", "data": {**payload, "cached": False}}

    async def uncategorized(self, period_id: str | None = None) -> dict[str, Any]:
        """List completed tasks of a period that no classification rule accepts."""

        source = self._require_source()
        period_id = period_id or self.current_period()
        period = self._require_period(period_id, with_goals=False)

        tasks = self._aggregator.filter_excluded(
            await source.search_completed_tasks(period.start_date, period.end_date)
        )
        unclassified = self._aggregator.uncategorized(tasks)
        return {
            "period_id": period_id,
            "total": len(tasks),
            "uncategorized": len(unclassified),
            "tasks": [
                {
                    "gid": task.gid,
                    "name": task.name,
                    "tags": [{"gid": tag.gid, "name": tag.name} for tag in task.tags],
                }
                for task in unclassified
            ],
        }

    async def open_documentation(self) -> list[dict[str, Any]]:
        """Open tasks tagged as documentation that classify as documentation."""

        source = self._require_source()
        tasks = self._aggregator.filter_excluded(
            await source.search_open_tasks(self._tag_table.ids_for(DOC))
        )
        classifier = self._aggregator.classifier
        records = []
        for task in tasks:
            outcome = classifier.classify(task)
            if outcome is None or outcome.category != DOCUMENTATION:
                continue
            records.append(
                {
                    "gid": task.gid,
                    "name": task.name,
                    "created_at": task.created_at,
                    "due_on": task.due_on,
                    "assignee": task.assignee or UNASSIGNED,
                    "collaborators": self._aggregator.collaborators(task),
                    "tags": task.tag_names,
                }
            )
        return records

    def cache_status(self) -> dict[str, Any]:
        entries = self._cache.status()
        limiter = getattr(self._source, "rate_limiter", None)
        return {
            "cached_quarters": list(entries),
            "entries": entries,
            "rate_limit_status": limiter.status() if limiter is not None else None,
        }

    async def _compute(self, period: PeriodConfig, source: TaskSource) -> dict[str, Any]:
        logger.info("Fetching fresh data", extra={"period_id": period.id})
        goals = period.goals or {}

        quarter_tasks = self._aggregator.filter_excluded(
            await source.search_completed_tasks(period.start_date, period.end_date)
        )
        open_docs = await self.open_documentation()

        monthly_progress: dict[str, Any] = {}
        for month in period.months:
            start, end = month_bounds(period.year, month)
            month_tasks = await source.search_completed_tasks(start, end)
            monthly_progress[month] = progress_as_dict(
                self._aggregator.aggregate(month_tasks, period.monthly.get(month, {}))
            )

        now = self._clock()
        return {
            "period_id": period.id,
            "quarter_name": period.name,
            "goals": goals,
            "progress": progress_as_dict(self._aggregator.aggregate(quarter_tasks, goals)),
            "total_tasks": len(quarter_tasks),
            "monthly": {
                "goals": period.monthly,
                "progress": monthly_progress,
                "months": list(period.months),
            },
            "open_documentation": open_docs,
            "end_of_month_deliverables": list(self._goals.end_of_month_deliverables),
            "current_date": now.isoformat(),
            "current_month": MONTH_NAMES[now.month - 1],
        }


__all__ = [
    "ConfigurationMissingError",
    "PeriodUnknownError",
    "ProgressService",
    "ProgressServiceError",
]
