"""Aggregate classified tasks into per-deliverable progress."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..classification import PatternDetector, TaskClassifier
from ..classification.tags import CONTENT_DELIVERABLES, PATTERNS_OWNED
from ..models import Classification, Task, TaskRecord

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


@dataclass(slots=True)
class DeliverableProgress:
    completed: int = 0
    tasks: list[TaskRecord] = field(default_factory=list)
    patterns_found: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "completed": self.completed,
            "tasks": [task.as_dict() for task in self.tasks],
        }
        if self.patterns_found is not None:
            payload["patterns_found"] = list(self.patterns_found)
        return payload


Progress = dict[str, dict[str, DeliverableProgress]]


def progress_as_dict(progress: Progress) -> dict[str, dict[str, dict[str, Any]]]:
    return {
        category: {deliverable: entry.as_dict() for deliverable, entry in deliverables.items()}
        for category, deliverables in progress.items()
    }


class ProgressAggregator:
    """Count classified tasks against a goal spec.

    Tasks assigned to an excluded contributor are dropped before
    classification. The patterns-owned slot is not classified directly: its
    count is the number of distinct agentic patterns found in content tasks.
    """

    def __init__(
        self,
        *,
        classifier: TaskClassifier | None = None,
        detector: PatternDetector | None = None,
        excluded_contributors: Iterable[str] = (),
        patterns_slot: Classification = PATTERNS_OWNED,
        content_deliverables: Iterable[str] = CONTENT_DELIVERABLES,
    ) -> None:
        self._classifier = classifier or TaskClassifier()
        self._detector = detector or PatternDetector()
        self._excluded = frozenset(excluded_contributors)
        self._patterns_slot = patterns_slot
        self._content_deliverables = frozenset(content_deliverables)

    @property
    def classifier(self) -> TaskClassifier:
        return self._classifier

    @property
    def excluded_contributors(self) -> frozenset[str]:
        return self._excluded

    def filter_excluded(self, tasks: Iterable[Task]) -> list[Task]:
        """Drop tasks assigned to excluded contributors. Unassigned tasks are kept."""

        tasks = list(tasks)
        kept = [task for task in tasks if not task.assignee or task.assignee not in self._excluded]
        dropped = len(tasks) - len(kept)
        if dropped:
            logger.info("Filtered out tasks from excluded contributors", extra={"excluded": dropped})
        return kept

    def collaborators(self, task: Task) -> list[str]:
        return [
            name
            for name in task.followers
            if name and name != task.assignee and name not in self._excluded
        ]

    def build_record(self, task: Task, patterns: Iterable[str] = ()) -> TaskRecord:
        return TaskRecord(
            gid=task.gid,
            name=task.name,
            completed_at=task.completed_at,
            assignee=task.assignee or UNASSIGNED,
            collaborators=self.collaborators(task),
            tags=task.tag_names,
            agentic_patterns=self._detector.ordered(patterns),
        )

    def aggregate(self, tasks: Iterable[Task], goals: Mapping[str, Mapping[str, Any]]) -> Progress:
        progress: Progress = {
            category: {deliverable: DeliverableProgress() for deliverable in deliverables}
            for category, deliverables in goals.items()
        }

        patterns_found: set[str] = set()
        pattern_tasks: list[TaskRecord] = []

        for task in self.filter_excluded(tasks):
            outcome = self._classifier.classify(task)
            if outcome is None:
                continue
            entry = progress.get(outcome.category, {}).get(outcome.deliverable)
            if entry is None:
                continue

            patterns = self._detector.detect(task.name)
            record = self.build_record(task, patterns)
            entry.completed += 1
            entry.tasks.append(record)

            if outcome.deliverable in self._content_deliverables and patterns:
                patterns_found.update(patterns)
                pattern_tasks.append(
                    TaskRecord(
                        gid=record.gid,
                        name=record.name,
                        completed_at=record.completed_at,
                        assignee=record.assignee,
                        collaborators=list(record.collaborators),
                        tags=list(record.tags),
                        agentic_patterns=list(record.agentic_patterns),
                        source_deliverable=outcome.deliverable,
                    )
                )

        slot = progress.get(self._patterns_slot.category, {}).get(self._patterns_slot.deliverable)
        if slot is not None:
            slot.completed = len(patterns_found)
            slot.tasks = pattern_tasks
            slot.patterns_found = self._detector.ordered(patterns_found)

        return progress

    def uncategorized(self, tasks: Iterable[Task]) -> list[Task]:
        """Tasks the classifier returns no outcome for."""

        return [task for task in self.filter_excluded(tasks) if self._classifier.classify(task) is None]


__all__ = [
    "DeliverableProgress",
    "Progress",
    "ProgressAggregator",
    "UNASSIGNED",
    "progress_as_dict",
]
