"""Deliverable names and the Asana tag lookup tables."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from ..models import Classification, Tag

BUILD = "Build"
VIDEOS = "Videos"
BLOGS = "Blogs"
LIVESTREAMS = "Livestreams"
PUBLIC_SPEAKING = "Public Speaking"
COMMUNITY = "Community"
DOCUMENTATION = "Documentation"

SIDE_PROJECTS = "Side projects"
CONTRIBUTIONS = "goose contributions"
AGENTIC_PATTERNS_OWNED = "Agentic patterns owned"
TUTORIAL_VIDEOS = "Tutorial videos"
SHORTS = "Shorts"
BLOG_POSTS = "Blog posts"
VIBE_CODE_STREAMS = "Vibe Code w/ goose streams"
CFPS = "CFPs (submitted or accepted)"
TALKS = "Talks delivered"
PODCASTS = "Podcast recordings"
NEWSLETTER_ISSUES = "Newsletter issues"
SPOTLIGHTS = "Spotlights"
METRICS_REPORTS = "Metrics reports"
COMMUNITY_GENERAL = "Community"
DOCS = "Docs"

SIDE_PROJECT = Classification(BUILD, SIDE_PROJECTS)
CONTRIBUTION = Classification(BUILD, CONTRIBUTIONS)
PATTERNS_OWNED = Classification(BUILD, AGENTIC_PATTERNS_OWNED)
TUTORIAL_VIDEO = Classification(VIDEOS, TUTORIAL_VIDEOS)
SHORT = Classification(VIDEOS, SHORTS)
BLOG_POST = Classification(BLOGS, BLOG_POSTS)
VIBE_CODE_STREAM = Classification(LIVESTREAMS, VIBE_CODE_STREAMS)
CFP = Classification(PUBLIC_SPEAKING, CFPS)
TALK = Classification(PUBLIC_SPEAKING, TALKS)
PODCAST = Classification(PUBLIC_SPEAKING, PODCASTS)
NEWSLETTER = Classification(COMMUNITY, NEWSLETTER_ISSUES)
SPOTLIGHT = Classification(COMMUNITY, SPOTLIGHTS)
METRICS_REPORT = Classification(COMMUNITY, METRICS_REPORTS)
COMMUNITY_WORK = Classification(COMMUNITY, COMMUNITY_GENERAL)
DOC = Classification(DOCUMENTATION, DOCS)

# Deliverables whose tasks are scanned for agentic patterns.
CONTENT_DELIVERABLES = frozenset({TUTORIAL_VIDEOS, SHORTS, BLOG_POSTS, VIBE_CODE_STREAMS})


class TagRole(str, Enum):
    """How a mapped tag is disambiguated against the task name."""

    PRIORITY = "priority"
    GENERIC_VIDEO = "generic_video"
    TUTORIAL = "tutorial"
    GENERIC_CONTRIBUTION = "generic_contribution"
    # Not used by the default tables; "goose contribution" is a priority tag.
    # Custom tables can mark a contribution tag that is accepted unconditionally.
    EXPLICIT_CONTRIBUTION = "explicit_contribution"
    STANDARD = "standard"


@dataclass(frozen=True, slots=True)
class TagMapping:
    classification: Classification
    role: TagRole = TagRole.STANDARD
    label: str = ""


class TagTable:
    """Identifier-keyed and name-keyed tag lookups.

    Identifier lookups are authoritative; the name table is consulted only for
    tags whose identifier is unknown.
    """

    def __init__(
        self,
        by_id: Mapping[str, TagMapping],
        by_name: Mapping[str, TagMapping],
    ) -> None:
        self._by_id = MappingProxyType(dict(by_id))
        self._by_name = MappingProxyType({name.lower(): mapping for name, mapping in by_name.items()})

    @property
    def by_id(self) -> Mapping[str, TagMapping]:
        return self._by_id

    @property
    def by_name(self) -> Mapping[str, TagMapping]:
        return self._by_name

    def lookup_id(self, tag: Tag) -> TagMapping | None:
        return self._by_id.get(tag.gid)

    def lookup_name(self, tag: Tag) -> TagMapping | None:
        if tag.gid in self._by_id:
            return None
        return self._by_name.get(tag.name.strip().lower())

    def resolve(self, tag: Tag) -> TagMapping | None:
        return self.lookup_id(tag) or self.lookup_name(tag)

    def has_role(self, tags: Iterable[Tag], role: TagRole) -> bool:
        for tag in tags:
            mapping = self.resolve(tag)
            if mapping is not None and mapping.role is role:
                return True
        return False

    def ids_for(self, classification: Classification) -> list[str]:
        """Return tag identifiers mapping onto ``classification``."""

        return [gid for gid, mapping in self._by_id.items() if mapping.classification == classification]


TAGS_BY_ID: dict[str, TagMapping] = {
    "1212903104247034": TagMapping(SIDE_PROJECT, TagRole.PRIORITY, "side project"),
    "1212892322315514": TagMapping(CFP, TagRole.PRIORITY, "cfp"),
    "1212903104247031": TagMapping(CONTRIBUTION, TagRole.PRIORITY, "goose contribution"),
    "1208438924809387": TagMapping(CONTRIBUTION, TagRole.GENERIC_CONTRIBUTION, "goose"),
    "1208125190486880": TagMapping(TUTORIAL_VIDEO, TagRole.TUTORIAL, "Video Tutorial"),
    "1204316592156255": TagMapping(TUTORIAL_VIDEO, TagRole.TUTORIAL, "tutorial"),
    "1204316592156190": TagMapping(SHORT, TagRole.GENERIC_VIDEO, "video"),
    "1204316592156209": TagMapping(BLOG_POST, label="blog"),
    "1205607058770995": TagMapping(VIBE_CODE_STREAM, label="livestream"),
    "1204316592156237": TagMapping(TALK, label="public speaking"),
    "1204316592156228": TagMapping(PODCAST, label="podcast"),
    "1206441534238594": TagMapping(TALK, label="workshop"),
    "1200006700367828": TagMapping(NEWSLETTER, label="Newsletter"),
    "1204364638447788": TagMapping(COMMUNITY_WORK, label="community"),
    "1204316592156189": TagMapping(DOC, label="documentation"),
    "1204463482160284": TagMapping(DOC, label="guide"),
    "1207924330531310": TagMapping(DOC, label="internal devrel"),
}

TAGS_BY_NAME: dict[str, TagMapping] = {
    "side project": TagMapping(SIDE_PROJECT, TagRole.PRIORITY),
    "cfp": TagMapping(CFP, TagRole.PRIORITY),
    "goose contribution": TagMapping(CONTRIBUTION, TagRole.PRIORITY),
    "goose": TagMapping(CONTRIBUTION, TagRole.GENERIC_CONTRIBUTION),
    "video tutorial": TagMapping(TUTORIAL_VIDEO, TagRole.TUTORIAL),
    "tutorial": TagMapping(TUTORIAL_VIDEO, TagRole.TUTORIAL),
    "video": TagMapping(SHORT, TagRole.GENERIC_VIDEO),
    "blog": TagMapping(BLOG_POST),
    "livestream": TagMapping(VIBE_CODE_STREAM),
    "public speaking": TagMapping(TALK),
    "podcast": TagMapping(PODCAST),
    "workshop": TagMapping(TALK),
    "newsletter": TagMapping(NEWSLETTER),
    "community": TagMapping(COMMUNITY_WORK),
    "documentation": TagMapping(DOC),
    "guide": TagMapping(DOC),
    "internal devrel": TagMapping(DOC),
}

DEFAULT_TAG_TABLE = TagTable(TAGS_BY_ID, TAGS_BY_NAME)


__all__ = [
    "AGENTIC_PATTERNS_OWNED",
    "BLOG_POST",
    "BLOG_POSTS",
    "CONTENT_DELIVERABLES",
    "CONTRIBUTION",
    "CONTRIBUTIONS",
    "DEFAULT_TAG_TABLE",
    "DOC",
    "DOCS",
    "DOCUMENTATION",
    "PATTERNS_OWNED",
    "SHORT",
    "SHORTS",
    "SIDE_PROJECT",
    "TUTORIAL_VIDEO",
    "TUTORIAL_VIDEOS",
    "TagMapping",
    "TagRole",
    "TagTable",
]
