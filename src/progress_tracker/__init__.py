"""DevRel goal progress tracker backed by Asana task data."""

__version__ = "0.1.0"

__all__ = ["__version__"]
