"""Helpers for splitting and merging Asana task searches."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from ..models import Task


def chunk_date_range(start: date, end: date, days: int) -> list[tuple[date, date]]:
    """Split the exclusive range ``(start, end)`` into sub-ranges of at most ``days``.

    Bounds are exclusive, so each following sub-range starts one day before
    the previous one's upper bound; no day is skipped at a boundary.
    """

    days = max(days, 2)
    if (end - start).days <= days:
        return [(start, end)]

    chunks: list[tuple[date, date]] = []
    after = start
    while True:
        before = min(after + timedelta(days=days), end)
        chunks.append((after, before))
        if before >= end:
            return chunks
        after = before - timedelta(days=1)


def dedupe_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Remove repeated tasks by identifier, keeping the first occurrence."""

    seen: set[str] = set()
    unique: list[Task] = []
    for task in tasks:
        if task.gid in seen:
            continue
        seen.add(task.gid)
        unique.append(task)
    return unique


__all__ = ["chunk_date_range", "dedupe_tasks"]
