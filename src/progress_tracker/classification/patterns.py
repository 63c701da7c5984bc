"""Regex tables used to veto, corroborate and annotate task classifications.

Exclusion patterns describe distribution, preparation or promotion of an
artifact rather than its creation. Confirmation patterns are required before
an ambiguous keyword or tag is accepted. Agentic patterns are the named
techniques tracked for the "Agentic patterns owned" deliverable.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterable, Mapping

from .tags import (
    BLOG_POSTS,
    CONTRIBUTIONS,
    DOCS,
    METRICS_REPORTS,
    NEWSLETTER_ISSUES,
    SHORTS,
    SIDE_PROJECTS,
    TUTORIAL_VIDEOS,
)

PatternTable = Mapping[str, tuple[re.Pattern[str], ...]]


def _compile(table: dict[str, Iterable[str]]) -> PatternTable:
    return MappingProxyType(
        {key: tuple(re.compile(source, re.IGNORECASE) for source in sources) for key, sources in table.items()}
    )


EXCLUSION_PATTERNS: PatternTable = _compile(
    {
        BLOG_POSTS: [
            r"promo",
            r"promot",
            r"share[ds]?\s+(the\s+)?blog",
            r"post(ed|ing)?\s+(on|to)\s+(social|twitter|linkedin|x\b)",
            r"social\s*media",
            r"automat",
        ],
        SHORTS: [
            r"schedul",
            r"post(ed|ing)?\s+(on|to)",
            r"share[ds]?",
            r"social",
            r"distribute",
            r"upload",
            r"promo",
        ],
        TUTORIAL_VIDEOS: [
            r"schedul",
            r"post(ed|ing)?\s+(on|to)",
            r"share[ds]?",
            r"social",
            r"distribute",
            r"promo",
        ],
        NEWSLETTER_ISSUES: [
            r"prep",
            r"plan(ning)?",
            r"draft",
            r"outline",
            r"idea",
        ],
        METRICS_REPORTS: [
            r"expense",
            r"status\s*report",
            r"weekly\s*report",
            r"progress\s*report",
        ],
        CONTRIBUTIONS: [
            r"session",
            r"meeting",
            r"prep(are|aring)?",
            r"schedul",
            r"demo",
            # PR reviews are still excluded; a review is not a merged change
            r"review",
            r"learn",
            r"test(ing)?\s+goose",
            r"goose\s*doc",
            r"doc(s|umentation)?\s*(for\s+)?goose",
        ],
        DOCS: [
            r"expense",
        ],
    }
)

CONFIRMATION_PATTERNS: PatternTable = _compile(
    {
        CONTRIBUTIONS: [
            r"\bpr\b",
            r"pull\s*request",
            r"merg(e|ed|ing)",
            r"fix(ed|ing|es)?\b",
            r"\bbug\b",
            r"feature",
            r"contribut",
            r"implement",
            r"ship(ped|ping)?",
            r"issue\s*#?\d+",
            r"resolv",
            r"clos(e|ed|ing)",
        ],
        BLOG_POSTS: [
            r"wro?te",
            r"writ(e|ing|ten)",
            r"publish",
            r"draft",
            r"\bblog\s*(post|article)",
            r"author",
        ],
        METRICS_REPORTS: [
            r"metrics",
            r"community\s*(metrics|report)",
            r"analytics",
            r"discord\s*(metrics|stats)",
            r"github\s*(metrics|stats)",
        ],
        SIDE_PROJECTS: [
            r"side\s*project",
            r"\brepo\b",
            r"repositor",
            r"built",
            r"building",
            r"ship(ped)?",
        ],
    }
)

# Order is significant: it is the order patterns are reported in.
AGENTIC_PATTERNS: PatternTable = _compile(
    {
        "MCP Apps": [r"mcp\s*app"],
        "MCP Sampling": [r"mcp\s*sampl", r"\bsampling\b"],
        # "taste" is teaching an agent preferences, which is a skill
        "Skills": [r"skill", r"taste"],
        "Elicitation": [r"elicit"],
        "Recipes": [r"recipe"],
        "Subagents": [r"subagent", r"sub-agent"],
        "Code Mode": [r"code\s*mode"],
        "ACP": [r"\bacp\b", r"agent\s*client\s*protocol"],
        "RPI": [r"\brpi\b"],
        "Ralph Wiggum Loop": [r"ralph"],
        "Context Engineering": [r"context\s*engineer", r"agents\.md", r"goosehints"],
        "ai-rules": [r"ai-rules", r"ai\s*rules"],
        "Plans": [r"\bplans?\b", r"planning\s*mode"],
        "Beads": [r"\bbeads?\b"],
    }
)


def matches_any(patterns: Iterable[re.Pattern[str]], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def is_excluded(text: str, deliverable: str, table: PatternTable = EXCLUSION_PATTERNS) -> bool:
    """Return True when ``text`` matches an exclusion pattern for ``deliverable``."""

    return matches_any(table.get(deliverable, ()), text)


def has_confirmation(text: str, deliverable: str, table: PatternTable = CONFIRMATION_PATTERNS) -> bool:
    """Return True when ``text`` is corroborated for ``deliverable``.

    Deliverables without confirmation patterns are always confirmed.
    """

    patterns = table.get(deliverable)
    if not patterns:
        return True
    return matches_any(patterns, text)


__all__ = [
    "AGENTIC_PATTERNS",
    "CONFIRMATION_PATTERNS",
    "EXCLUSION_PATTERNS",
    "PatternTable",
    "has_confirmation",
    "is_excluded",
    "matches_any",
]
