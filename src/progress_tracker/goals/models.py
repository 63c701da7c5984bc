"""Goal and period configuration models."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .periods import MONTH_NAMES, parse_quarter_id, quarter_bounds, quarter_months, quarter_name

# A numeric target, or None for deliverables tracked on an as-needed basis.
Target = Annotated[int, Field(ge=0)] | None
GoalSpec = dict[str, dict[str, Target]]


class PeriodConfig(BaseModel):
    """Date window and goals for one quarter."""

    id: str = Field(..., description="Period identifier such as 2026-Q1.")
    name: str = Field(..., description="Display name for the period.")
    start_date: date = Field(..., description="Exclusive lower bound, the day before the period.")
    end_date: date = Field(..., description="Exclusive upper bound, the day after the period.")
    months: list[str] = Field(default_factory=list)
    goals: GoalSpec | None = Field(
        default=None,
        description="Quarterly targets; periods without goals are not served.",
    )
    monthly: dict[str, GoalSpec] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _derive_quarter_defaults(cls, data: Any):
        if not isinstance(data, dict) or "id" not in data:
            return data
        try:
            year, quarter = parse_quarter_id(str(data["id"]))
        except ValueError:
            return data
        start, end = quarter_bounds(year, quarter)
        derived = dict(data)
        derived.setdefault("name", quarter_name(year, quarter))
        derived.setdefault("start_date", start)
        derived.setdefault("end_date", end)
        derived.setdefault("months", quarter_months(quarter))
        return derived

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Period id must not be empty")
        return normalized

    @field_validator("months")
    @classmethod
    def _validate_months(cls, value: list[str]) -> list[str]:
        unknown = [month for month in value if month not in MONTH_NAMES]
        if unknown:
            raise ValueError(f"Unknown month names: {', '.join(unknown)}")
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "PeriodConfig":
        if self.end_date <= self.start_date:
            raise ValueError(f"Period {self.id} end_date must be after start_date")
        stray = [month for month in self.monthly if month not in self.months]
        if stray:
            raise ValueError(f"Period {self.id} has monthly goals for months outside the period: {', '.join(stray)}")
        return self

    @property
    def year(self) -> int:
        try:
            return parse_quarter_id(self.id)[0]
        except ValueError:
            return (self.start_date + (self.end_date - self.start_date) / 2).year


class GoalsConfig(BaseModel):
    """Top-level goals document."""

    excluded_contributors: list[str] = Field(
        default_factory=list,
        description="People whose tasks never count toward team goals.",
    )
    end_of_month_deliverables: list[str] = Field(
        default_factory=list,
        description="Deliverables shown as pending until the month closes.",
    )
    periods: dict[str, PeriodConfig] = Field(default_factory=dict)

    @field_validator("periods", mode="before")
    @classmethod
    def _inject_period_ids(cls, value: Any):
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise TypeError("periods must be a mapping of period id to period config")
        injected: dict[str, Any] = {}
        for key, body in value.items():
            body = dict(body or {}) if not isinstance(body, PeriodConfig) else body
            if isinstance(body, dict):
                body.setdefault("id", str(key))
            injected[str(key)] = body
        return injected

    def get(self, period_id: str) -> PeriodConfig | None:
        return self.periods.get(period_id)

    def known_periods(self) -> list[PeriodConfig]:
        """Periods with quarterly goals, in declaration order."""

        return [period for period in self.periods.values() if period.goals is not None]

    def available(self) -> list[dict[str, str]]:
        return [{"id": period.id, "name": period.name} for period in self.known_periods()]


__all__ = ["GoalSpec", "GoalsConfig", "PeriodConfig", "Target"]
