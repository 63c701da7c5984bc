"""Task classification rules, pattern tables and detectors."""

from .classifier import TaskClassifier
from .detector import PatternDetector
from .patterns import AGENTIC_PATTERNS, CONFIRMATION_PATTERNS, EXCLUSION_PATTERNS
from .rules import DEFAULT_RULES, KeywordRule, PriorityTagRule, TagLookupRule, build_default_rules
from .tags import DEFAULT_TAG_TABLE, TagMapping, TagRole, TagTable

__all__ = [
    "AGENTIC_PATTERNS",
    "CONFIRMATION_PATTERNS",
    "DEFAULT_RULES",
    "DEFAULT_TAG_TABLE",
    "EXCLUSION_PATTERNS",
    "KeywordRule",
    "PatternDetector",
    "PriorityTagRule",
    "TagLookupRule",
    "TagMapping",
    "TagRole",
    "TagTable",
    "TaskClassifier",
    "build_default_rules",
]
