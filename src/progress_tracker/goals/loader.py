"""Goals loading utilities."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import GoalsConfig


class GoalsLoadError(RuntimeError):
    """Raised when the goals file cannot be read, parsed or validated."""


class GoalsLoader:
    """Loads the goals document from a YAML file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> GoalsConfig:
        if not self._path.exists():
            raise GoalsLoadError(f"Goals file not found at {self._path}")

        try:
            document = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:  # pragma: no cover - library type
            raise GoalsLoadError(f"Failed to parse YAML in {self._path}: {exc}") from exc

        if document is None:
            return GoalsConfig()
        if not isinstance(document, dict):
            raise GoalsLoadError(f"Goals file {self._path} must contain a mapping at the top level")

        try:
            return GoalsConfig.model_validate(document)
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            ]
            raise GoalsLoadError(f"Goals validation error in {self._path}: " + "; ".join(errors)) from exc


def load_goals(path: Path) -> GoalsConfig:
    """Convenience wrapper for loading the goals document at ``path``."""

    return GoalsLoader(path).load()


__all__ = ["GoalsLoadError", "GoalsLoader", "load_goals"]
