"""In-memory storage for computed progress."""

from .cache import ProgressCache
from .models import CacheEntry

__all__ = ["CacheEntry", "ProgressCache"]
