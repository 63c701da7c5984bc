"""Task classifier that maps a task onto a single deliverable."""

from __future__ import annotations

from typing import Sequence

from ..models import Classification, Task
from .rules import DEFAULT_RULES, Rule


class TaskClassifier:
    """Evaluate the rule chain against a task, first match wins.

    Classification is a pure function of the task name and tags; a task no
    rule accepts yields ``None`` rather than an error.
    """

    def __init__(self, rules: Sequence[Rule] | None = None) -> None:
        self._rules: tuple[Rule, ...] = tuple(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def classify(self, task: Task) -> Classification | None:
        return self.explain(task)[0]

    def explain(self, task: Task) -> tuple[Classification | None, str | None]:
        """Return the outcome together with the name of the rule that produced it."""

        for rule in self._rules:
            outcome = rule.evaluate(task)
            if outcome is not None:
                return outcome, rule.name
        return None, None


__all__ = ["TaskClassifier"]
