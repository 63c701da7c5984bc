"""Classification rules evaluated in priority order, first match wins.

Each rule is a pure object exposing ``name`` and ``evaluate(task)``, which
returns a :class:`Classification` or ``None`` when the rule does not apply.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from ..models import Classification, Tag, Task
from .patterns import has_confirmation, is_excluded
from .tags import (
    BLOG_POST,
    BLOG_POSTS,
    CFP,
    CONTRIBUTION,
    CONTRIBUTIONS,
    DEFAULT_TAG_TABLE,
    DOC,
    DOCS,
    METRICS_REPORT,
    METRICS_REPORTS,
    NEWSLETTER,
    NEWSLETTER_ISSUES,
    PODCAST,
    SHORT,
    SHORTS,
    SIDE_PROJECT,
    SIDE_PROJECTS,
    SPOTLIGHT,
    TALK,
    TUTORIAL_VIDEO,
    TUTORIAL_VIDEOS,
    VIBE_CODE_STREAM,
    TagMapping,
    TagRole,
    TagTable,
)


class Rule(Protocol):
    name: str

    def evaluate(self, task: Task) -> Classification | None:
        ...


def _has(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


_UNDER_A_MINUTE = re.compile(r"under\s*(60|1\s*min)", re.IGNORECASE)
_DOCS_FOR_GOOSE = re.compile(r"doc(s|umentation)?\s*(for\s+)?goose", re.IGNORECASE)


def short_indicator(text: str) -> bool:
    """Brevity wording that marks a short-form video."""

    if "shortcut" in text:
        return False
    return _has(text, "short", "[shorts]", "quick tip") or bool(_UNDER_A_MINUTE.search(text))


def tutorial_subject(text: str) -> bool:
    return _has(text, "tutorial", "plug & play", "plug and play", "flight school")


def written_tutorial_subject(text: str) -> bool:
    return _has(text, "tutorial", "plug & play", "plug and play")


def video_keyword(text: str) -> bool:
    return _has(text, "video", "filmed", "recorded", "youtube")


def video_evidence(text: str) -> bool:
    """Medium indicators that a tutorial was a video rather than written."""

    if video_keyword(text):
        return True
    return "published" in text and not _has(text, "doc", "blog")


@dataclass(frozen=True, slots=True)
class PriorityTagRule:
    """Short-circuits to a fixed outcome when a priority tag is present."""

    name: str
    outcome: Classification
    table: TagTable = DEFAULT_TAG_TABLE

    def evaluate(self, task: Task) -> Classification | None:
        for tag in task.tags:
            mapping = self.table.resolve(tag)
            if mapping is not None and mapping.role is TagRole.PRIORITY and mapping.classification == self.outcome:
                return self.outcome
        return None


@dataclass(frozen=True, slots=True)
class TagLookupRule:
    """Applies the tag table by identifier or, for unknown identifiers, by name."""

    name: str
    by: str = "id"
    table: TagTable = DEFAULT_TAG_TABLE

    def _lookup(self, tag: Tag) -> TagMapping | None:
        if self.by == "id":
            return self.table.lookup_id(tag)
        return self.table.lookup_name(tag)

    def evaluate(self, task: Task) -> Classification | None:
        for tag in task.tags:
            mapping = self._lookup(tag)
            if mapping is None or mapping.role is TagRole.PRIORITY:
                continue
            outcome = self._disambiguate(mapping, task)
            if outcome is not None:
                return outcome
        return None

    def _disambiguate(self, mapping: TagMapping, task: Task) -> Classification | None:
        text = task.name
        lowered = text.lower()
        role = mapping.role

        if role is TagRole.GENERIC_VIDEO:
            if short_indicator(lowered) and not is_excluded(text, SHORTS):
                return SHORT
            has_tutorial_tag = self.table.has_role(task.tags, TagRole.TUTORIAL)
            if (has_tutorial_tag or tutorial_subject(lowered)) and not is_excluded(text, TUTORIAL_VIDEOS):
                return TUTORIAL_VIDEO
            if not is_excluded(text, SHORTS):
                return SHORT
            return None

        if role is TagRole.TUTORIAL:
            if self.table.has_role(task.tags, TagRole.GENERIC_VIDEO) or video_keyword(lowered):
                return TUTORIAL_VIDEO
            return DOC

        if role is TagRole.GENERIC_CONTRIBUTION:
            deliverable = mapping.classification.deliverable
            if is_excluded(text, deliverable) or not has_confirmation(text, deliverable):
                return None
            return mapping.classification

        if role is TagRole.EXPLICIT_CONTRIBUTION:
            return mapping.classification

        if is_excluded(text, mapping.classification.deliverable):
            return None
        return mapping.classification


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """Infers an outcome from the task name alone.

    ``matches`` receives the lower-cased name. ``exclusions`` and
    ``confirmation`` name the deliverable whose pattern sets veto or
    corroborate the match.
    """

    name: str
    outcome: Classification
    matches: Callable[[str], bool]
    exclusions: str | None = None
    confirmation: str | None = None

    def evaluate(self, task: Task) -> Classification | None:
        text = task.name
        if not self.matches(text.lower()):
            return None
        if self.exclusions is not None and is_excluded(text, self.exclusions):
            return None
        if self.confirmation is not None and not has_confirmation(text, self.confirmation):
            return None
        return self.outcome


KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "keyword:shorts",
        SHORT,
        lambda t: _has(t, "[shorts]", "quick tip") or ("short" in t and "shortcut" not in t),
        exclusions=SHORTS,
    ),
    KeywordRule(
        "keyword:tutorial-video",
        TUTORIAL_VIDEO,
        lambda t: tutorial_subject(t) and video_evidence(t),
        exclusions=TUTORIAL_VIDEOS,
    ),
    KeywordRule(
        "keyword:written-tutorial",
        DOC,
        lambda t: written_tutorial_subject(t) and not video_evidence(t),
        exclusions=DOCS,
    ),
    KeywordRule(
        "keyword:livestream",
        VIBE_CODE_STREAM,
        lambda t: _has(t, "livestream", "vibe code") or ("stream" in t and "goose" in t),
    ),
    KeywordRule(
        "keyword:blog",
        BLOG_POST,
        lambda t: _has(t, "blog", "article"),
        exclusions=BLOG_POSTS,
        confirmation=BLOG_POSTS,
    ),
    KeywordRule(
        "keyword:cfp",
        CFP,
        lambda t: "cfp" in t or ("submit" in t and _has(t, "conference", "talk")),
    ),
    KeywordRule(
        "keyword:podcast",
        PODCAST,
        lambda t: _has(t, "podcast", "guest recording") or ("recording" in t and "guest" in t),
    ),
    KeywordRule(
        "keyword:talk",
        TALK,
        lambda t: _has(t, "keynote", "workshop") or ("talk" in t and _has(t, "deliver", "gave", "present")),
    ),
    KeywordRule(
        "keyword:newsletter",
        NEWSLETTER,
        lambda t: "newsletter" in t,
        exclusions=NEWSLETTER_ISSUES,
    ),
    KeywordRule("keyword:spotlight", SPOTLIGHT, lambda t: "spotlight" in t),
    KeywordRule(
        "keyword:metrics",
        METRICS_REPORT,
        lambda t: _has(t, "metrics", "report"),
        exclusions=METRICS_REPORTS,
        confirmation=METRICS_REPORTS,
    ),
    KeywordRule(
        "keyword:contribution",
        CONTRIBUTION,
        lambda t: "goose" in t,
        exclusions=CONTRIBUTIONS,
        confirmation=CONTRIBUTIONS,
    ),
    KeywordRule(
        "keyword:side-project",
        SIDE_PROJECT,
        lambda t: _has(t, "side project", "sideproject"),
        confirmation=SIDE_PROJECTS,
    ),
    KeywordRule(
        "keyword:goose-docs",
        DOC,
        lambda t: _has(t, "goose doc", "goose-doc")
        or bool(_DOCS_FOR_GOOSE.search(t))
        or ("goose" in t and "documentation" in t),
        exclusions=DOCS,
    ),
    KeywordRule(
        "keyword:docs",
        DOC,
        lambda t: "documentation" in t or ("doc" in t and _has(t, "wrote", "update", "add")),
        exclusions=DOCS,
    ),
)


def build_default_rules(table: TagTable = DEFAULT_TAG_TABLE) -> tuple[Rule, ...]:
    """Return the rule chain in evaluation order."""

    return (
        PriorityTagRule("priority:side-project", SIDE_PROJECT, table),
        PriorityTagRule("priority:cfp", CFP, table),
        PriorityTagRule("priority:contribution", CONTRIBUTION, table),
        TagLookupRule("tags:id", "id", table),
        TagLookupRule("tags:name", "name", table),
        *KEYWORD_RULES,
    )


DEFAULT_RULES: Sequence[Rule] = build_default_rules()


__all__ = [
    "DEFAULT_RULES",
    "KEYWORD_RULES",
    "KeywordRule",
    "PriorityTagRule",
    "Rule",
    "TagLookupRule",
    "build_default_rules",
    "short_indicator",
    "tutorial_subject",
    "video_evidence",
]
