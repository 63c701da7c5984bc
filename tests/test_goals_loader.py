from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from progress_tracker.goals import GoalsLoadError, GoalsLoader, load_goals

SHIPPED_GOALS = Path(__file__).resolve().parents[1] / "config" / "goals.yaml"


def write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "goals.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_shipped_goals_load() -> None:
    config = load_goals(SHIPPED_GOALS)

    assert [period.id for period in config.known_periods()] == ["2026-Q1"]
    assert "Eva Sasson" in config.excluded_contributors

    q1 = config.get("2026-Q1")
    assert q1 is not None
    assert q1.goals["Documentation"]["Docs"] is None
    assert q1.goals["Videos"]["Shorts"] == 6
    assert set(q1.monthly) == {"January", "February", "March"}


def test_period_without_goals_derives_dates() -> None:
    config = load_goals(SHIPPED_GOALS)

    q2 = config.get("2026-Q2")

    assert q2 is not None
    assert q2.goals is None
    assert q2.name == "Q2 2026"
    assert (q2.start_date, q2.end_date) == (date(2026, 3, 31), date(2026, 7, 1))
    assert q2.months == ["April", "May", "June"]
    assert {"id": "2026-Q2", "name": "Q2 2026"} not in config.available()


def test_negative_target_rejected(tmp_path: Path) -> None:
    path = write(
        tmp_path,
        """
periods:
  2026-Q3:
    goals:
      Blogs:
        Blog posts: -1
""",
    )

    with pytest.raises(GoalsLoadError) as excinfo:
        GoalsLoader(path).load()

    assert "Blog posts" in str(excinfo.value)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(GoalsLoadError, match="not found"):
        load_goals(tmp_path / "absent.yaml")


def test_empty_file_yields_empty_config(tmp_path: Path) -> None:
    config = load_goals(write(tmp_path, ""))

    assert config.periods == {}
    assert config.available() == []


def test_non_mapping_document_rejected(tmp_path: Path) -> None:
    with pytest.raises(GoalsLoadError, match="mapping"):
        load_goals(write(tmp_path, "- just\n- a list\n"))


def test_monthly_goals_outside_period_rejected(tmp_path: Path) -> None:
    path = write(
        tmp_path,
        """
periods:
  2026-Q3:
    goals:
      Blogs: {Blog posts: 3}
    monthly:
      December:
        Blogs: {Blog posts: 1}
""",
    )

    with pytest.raises(GoalsLoadError, match="December"):
        load_goals(path)


def test_explicit_dates_override_derived(tmp_path: Path) -> None:
    path = write(
        tmp_path,
        """
periods:
  offsite:
    name: Offsite sprint
    start_date: 2026-05-09
    end_date: 2026-05-20
    months: [May]
    goals:
      Blogs: {Blog posts: 2}
""",
    )

    period = load_goals(path).get("offsite")

    assert period is not None
    assert period.name == "Offsite sprint"
    assert period.year == 2026
    assert period.end_date == date(2026, 5, 20)
