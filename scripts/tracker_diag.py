"""Progress tracker diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import json

from progress_tracker.asana import AsanaClientError
from progress_tracker.classification import PatternDetector, TaskClassifier
from progress_tracker.config import TrackerSettings
from progress_tracker.goals import GoalsLoadError, load_goals
from progress_tracker.models import Tag, Task
from progress_tracker.service import ProgressService, ProgressServiceError


def load_service(settings: TrackerSettings) -> ProgressService:
    try:
        return ProgressService.from_settings(settings)
    except GoalsLoadError as exc:
        print(f"Goals unavailable: {exc}")
        raise SystemExit(1)


def cmd_classify(args: argparse.Namespace) -> None:
    tags = [Tag(gid=gid, name="") for gid in args.tag_id or []]
    tags += [Tag(gid="", name=name) for name in args.tag or []]
    task = Task(gid="adhoc", name=args.name, tags=tuple(tags))

    outcome, rule = TaskClassifier().explain(task)
    detector = PatternDetector()
    payload = {
        "name": args.name,
        "classification": outcome.as_dict() if outcome is not None else None,
        "rule": rule,
        "agentic_patterns": detector.ordered(detector.detect(args.name)),
    }
    print(json.dumps(payload, indent=2))


def cmd_periods(args: argparse.Namespace) -> None:
    settings = TrackerSettings()
    try:
        goals = load_goals(settings.goals_path)
    except GoalsLoadError as exc:
        print(f"Goals unavailable: {exc}")
        raise SystemExit(1)

    payload = [
        {
            "id": period.id,
            "name": period.name,
            "start_date": period.start_date.isoformat(),
            "end_date": period.end_date.isoformat(),
            "months": period.months,
            "has_goals": period.goals is not None,
        }
        for period in goals.periods.values()
    ]
    print(json.dumps(payload, indent=2))


def cmd_uncategorized(args: argparse.Namespace) -> None:
    settings = TrackerSettings()
    service = load_service(settings)

    async def run() -> dict:
        try:
            return await service.uncategorized(args.period_id)
        finally:
            close = getattr(service.source, "aclose", None)
            if close is not None:
                await close()

    try:
        report = asyncio.run(run())
    except (ProgressServiceError, AsanaClientError) as exc:
        print(f"Uncategorized lookup failed: {exc}")
        raise SystemExit(1)

    if args.json:
        print(json.dumps(report, indent=2))
        return
    print(f"{report['period_id']}: {report['uncategorized']} of {report['total']} tasks uncategorized")
    for task in report["tasks"]:
        tag_names = ", ".join(tag["name"] for tag in task["tags"]) or "-"
        print(f"{task['gid']} {task['name']} [{tag_names}]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Progress tracker diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_classify = sub.add_parser("classify", help="Classify a task name offline")
    p_classify.add_argument("name")
    p_classify.add_argument("--tag-id", action="append", help="Asana tag gid (repeatable)")
    p_classify.add_argument("--tag", action="append", help="Tag display name (repeatable)")
    p_classify.set_defaults(func=cmd_classify)

    p_periods = sub.add_parser("periods", help="List configured periods")
    p_periods.set_defaults(func=cmd_periods)

    p_uncategorized = sub.add_parser(
        "uncategorized",
        help="List completed tasks no rule classifies",
    )
    p_uncategorized.add_argument("period_id", nargs="?")
    p_uncategorized.add_argument("--json", action="store_true", help="Output JSON")
    p_uncategorized.set_defaults(func=cmd_uncategorized)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
