"""Goal configuration models, loader and period helpers."""

from .loader import GoalsLoadError, GoalsLoader, load_goals
from .models import GoalSpec, GoalsConfig, PeriodConfig
from .periods import current_quarter, is_period_past, month_bounds

__all__ = [
    "GoalSpec",
    "GoalsConfig",
    "GoalsLoadError",
    "GoalsLoader",
    "PeriodConfig",
    "current_quarter",
    "is_period_past",
    "load_goals",
    "month_bounds",
]
