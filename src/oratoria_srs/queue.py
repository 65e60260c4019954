"""Due-item helpers used by callers that query the review queue."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Hashable, Iterable, Optional, TypeVar

from .models import QueueSummary, SchedulingState


K = TypeVar("K", bound=Hashable)


def is_due(state: SchedulingState, now: datetime) -> bool:
    """An item is due once `now` reaches `next_review` (inclusive)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return state.next_review <= now


def _check_limit(limit: Optional[int]) -> None:
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0 (got {limit})")


def due_items(
    entries: Iterable[tuple[K, SchedulingState]],
    now: datetime,
    limit: Optional[int] = None,
) -> list[tuple[K, SchedulingState]]:
    """Return due (key, state) pairs, most overdue first.

    期限超過が大きい順。同じ next_review は入力順を保つ。
    limit を指定した場合は並べ替え後に先頭 limit 件だけ返す。
    """
    _check_limit(limit)
    due = [(key, state) for key, state in entries if is_due(state, now)]
    due.sort(key=lambda pair: pair[1].next_review)
    if limit is not None:
        return due[:limit]
    return due


def summarize_queue(
    states: Iterable[SchedulingState],
    now: datetime,
    limit: Optional[int] = None,
) -> QueueSummary:
    _check_limit(limit)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    utc_now = now.astimezone(timezone.utc)
    today_start = utc_now.replace(hour=0, minute=0, second=0, microsecond=0)

    summary = QueueSummary()
    for state in states:
        if state.next_review <= utc_now:
            summary.total_due += 1
        if state.next_review < today_start:
            summary.overdue += 1
        if state.last_review is None and state.repetitions == 0:
            summary.new += 1
    summary.due_now = summary.total_due if limit is None else min(summary.total_due, limit)
    return summary
