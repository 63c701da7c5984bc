"""Agentic pattern detection over free text."""

from __future__ import annotations

from typing import Iterable

from .patterns import AGENTIC_PATTERNS, PatternTable, matches_any


class PatternDetector:
    def __init__(self, patterns: PatternTable = AGENTIC_PATTERNS) -> None:
        self._patterns = patterns

    @property
    def names(self) -> list[str]:
        return list(self._patterns)

    def detect(self, text: str) -> frozenset[str]:
        """Return every pattern with at least one regex matching ``text``."""

        return frozenset(name for name, regexes in self._patterns.items() if matches_any(regexes, text))

    def ordered(self, names: Iterable[str]) -> list[str]:
        """Sort pattern names into library order."""

        wanted = set(names)
        return [name for name in self._patterns if name in wanted]


__all__ = ["PatternDetector"]
