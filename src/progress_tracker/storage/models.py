"""Data models for cached progress payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class CacheEntry:
    period_id: str
    payload: dict[str, Any]
    created_at: datetime
    is_past: bool


__all__ = ["CacheEntry"]
