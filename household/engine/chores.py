"""
Chore priority calculations.

Given the completion log, work out when each (area, task) chore was last
done and which ones are the most overdue.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from household.models.chore import ChoreCell, ChoreCompletion, ChorePriority, Freshness


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def days_since(moment: datetime, now: datetime) -> int:
    """Whole days elapsed between ``moment`` and ``now`` (floored)."""
    elapsed = _aware(now) - _aware(moment)
    return int(elapsed.total_seconds() // 86400)


def last_completed(
    completions: Iterable[ChoreCompletion],
    area: str,
    task: str,
) -> Optional[datetime]:
    """Most recent completion time of one chore, or None if never done."""
    times = [c.completed_at for c in completions if c.area == area and c.task == task]
    return max(times) if times else None


def _last_completed_map(completions: Iterable[ChoreCompletion]) -> dict:
    latest: dict = {}
    for c in completions:
        key = (c.area, c.task)
        if key not in latest or c.completed_at > latest[key]:
            latest[key] = c.completed_at
    return latest


def top_priorities(
    completions: Iterable[ChoreCompletion],
    areas: Sequence[str],
    tasks: Sequence[str],
    now: datetime,
    limit: int = 5,
) -> List[ChorePriority]:
    """The ``limit`` most neglected chores.

    Chores never done come first, then the longest since last done.
    Ties keep the configured area-then-task order.
    """
    latest = _last_completed_map(completions)

    ranked = []
    for area in areas:
        for task in tasks:
            done_at = latest.get((area, task))
            ranked.append(
                ChorePriority(
                    area=area,
                    task=task,
                    last_completed=done_at,
                    days_ago=days_since(done_at, now) if done_at else None,
                )
            )

    # sorted() is stable, so equal keys stay in area/task order
    ranked = sorted(
        ranked,
        key=lambda p: (p.days_ago is not None, -(p.days_ago or 0)),
    )
    return ranked[:limit]


def status_grid(
    completions: Iterable[ChoreCompletion],
    areas: Sequence[str],
    tasks: Sequence[str],
    now: datetime,
    recent_days: int = 7,
) -> List[List[ChoreCell]]:
    """One row per area, one cell per task, tagged with how fresh it is."""
    latest = _last_completed_map(completions)

    grid = []
    for area in areas:
        row = []
        for task in tasks:
            done_at = latest.get((area, task))
            if done_at is None:
                freshness = Freshness.NEVER
            elif (_aware(now) - _aware(done_at)).total_seconds() < recent_days * 86400:
                freshness = Freshness.RECENT
            else:
                freshness = Freshness.STALE
            row.append(
                ChoreCell(area=area, task=task, last_completed=done_at, freshness=freshness)
            )
        grid.append(row)
    return grid


def format_time_ago(moment: datetime, now: datetime) -> str:
    """Human friendly age of a completion, e.g. "Yesterday" or "3 weeks ago"."""
    days = days_since(moment, now)

    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    if days < 365:
        return f"{days // 30} months ago"
    return f"{days // 365} years ago"


def recent_activity(
    completions: Iterable[ChoreCompletion],
    limit: int = 20,
) -> List[ChoreCompletion]:
    """Newest completions first."""
    return sorted(completions, key=lambda c: c.completed_at, reverse=True)[:limit]
