"""Time and completion progress figures shown alongside each project."""

import math
from datetime import UTC, datetime, timedelta

from mindplan.models import Project

_DAY = timedelta(days=1)


def parse_project_date(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime. Naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_iso_date(value: str) -> bool:
    try:
        parse_project_date(value)
    except ValueError:
        return False
    return True


def project_completion(root_completions: list[float]) -> float:
    """Mean completion of a project's root nodes; 0 for a project with no nodes."""
    if not root_completions:
        return 0.0
    return sum(root_completions) / len(root_completions)


def time_progress(project: Project, now: datetime | None = None) -> dict:
    """Elapsed share of the project window plus whole-day counters.

    ``days_remaining`` rounds up and goes negative once the end date has
    passed, which is what ``is_overdue`` keys on.
    """
    now = now or datetime.now(UTC)
    progress = {
        "time_progress": 0.0,
        "days_elapsed": 0,
        "days_remaining": 0,
        "is_overdue": False,
    }
    if not project.start_date or not project.end_date:
        return progress

    start = parse_project_date(project.start_date)
    end = parse_project_date(project.end_date)
    total = end - start
    elapsed = now - start

    if total > timedelta(0):
        share = elapsed / total * 100
        progress["time_progress"] = max(0.0, min(100.0, share))
    else:
        progress["time_progress"] = 100.0 if now >= end else 0.0

    progress["days_elapsed"] = math.floor(elapsed / _DAY)
    progress["days_remaining"] = math.ceil((end - now) / _DAY)
    progress["is_overdue"] = progress["days_remaining"] < 0
    return progress
