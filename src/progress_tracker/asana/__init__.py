"""Asana task source."""

from .client import (
    AsanaClient,
    AsanaClientError,
    FakeTaskSource,
    RateLimiter,
    SourceRateLimitedError,
    SourceUnavailableError,
    TaskSource,
)

__all__ = [
    "AsanaClient",
    "AsanaClientError",
    "FakeTaskSource",
    "RateLimiter",
    "SourceRateLimitedError",
    "SourceUnavailableError",
    "TaskSource",
]
