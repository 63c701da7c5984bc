"""Task records consumed by the classifier and aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Tag:
    gid: str
    name: str


@dataclass(frozen=True, slots=True)
class Task:
    """A task fetched from the task source. Never mutated after construction."""

    gid: str
    name: str
    completed_at: str | None = None
    tags: tuple[Tag, ...] = ()
    assignee: str | None = None
    followers: tuple[str, ...] = ()
    created_at: str | None = None
    due_on: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Task":
        """Build a task from an Asana search result, dropping duplicate tag ids."""

        tags: list[Tag] = []
        seen: set[str] = set()
        for raw in payload.get("tags") or []:
            gid = str(raw.get("gid") or "")
            if gid and gid in seen:
                continue
            seen.add(gid)
            tags.append(Tag(gid=gid, name=raw.get("name") or ""))

        assignee = payload.get("assignee") or {}
        followers = tuple(
            follower["name"]
            for follower in payload.get("followers") or []
            if follower and follower.get("name")
        )
        return cls(
            gid=str(payload.get("gid", "")),
            name=payload.get("name") or "",
            completed_at=payload.get("completed_at"),
            tags=tuple(tags),
            assignee=assignee.get("name"),
            followers=followers,
            created_at=payload.get("created_at"),
            due_on=payload.get("due_on"),
        )

    @property
    def tag_names(self) -> list[str]:
        return [tag.name for tag in self.tags]


@dataclass(frozen=True, slots=True)
class Classification:
    """The (category, deliverable) bucket a task counts toward."""

    category: str
    deliverable: str

    def as_dict(self) -> dict[str, str]:
        return {"category": self.category, "deliverable": self.deliverable}


@dataclass(slots=True)
class TaskRecord:
    """Display record for a task that contributed to a deliverable."""

    gid: str
    name: str
    completed_at: str | None
    assignee: str
    collaborators: list[str]
    tags: list[str]
    agentic_patterns: list[str] = field(default_factory=list)
    source_deliverable: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "gid": self.gid,
            "name": self.name,
            "completed_at": self.completed_at,
            "assignee": self.assignee,
            "collaborators": list(self.collaborators),
            "tags": list(self.tags),
            "agentic_patterns": list(self.agentic_patterns),
        }
        if self.source_deliverable is not None:
            payload["source_deliverable"] = self.source_deliverable
        return payload


__all__ = ["Classification", "Tag", "Task", "TaskRecord"]
