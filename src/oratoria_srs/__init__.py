"""Spaced-repetition scheduling engine.

SM-2 系アルゴリズムで (ユーザ, 学習項目) ごとの次回出題時刻を決める。
"""

from .errors import IntegrityMismatch, InvalidReviewInput, SchedulingError
from .integrity import verify_state
from .models import (
    IntegrityReport,
    Outcome,
    OutputModality,
    QueueSummary,
    ReviewOutcome,
    SchedulingState,
)
from .queue import due_items, is_due, summarize_queue
from .srs import (
    Scheduler,
    fold,
    initial_state,
    load_state,
    make_outcome,
    outcome_to_quality,
    quality_to_outcome,
    replay,
)

__all__ = [
    "IntegrityMismatch",
    "IntegrityReport",
    "InvalidReviewInput",
    "Outcome",
    "OutputModality",
    "QueueSummary",
    "ReviewOutcome",
    "Scheduler",
    "SchedulingError",
    "SchedulingState",
    "due_items",
    "fold",
    "initial_state",
    "is_due",
    "load_state",
    "make_outcome",
    "outcome_to_quality",
    "quality_to_outcome",
    "replay",
    "summarize_queue",
    "verify_state",
]
