"""Exceptions raised at the edges of the scheduling engine.

`fold` / `replay` 自体は例外を送出しない。入力の検証は呼び出し前
（ReviewOutcome / SchedulingState の生成時）に行う。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import IntegrityReport


class SchedulingError(Exception):
    """Base class for scheduling engine errors."""


class InvalidReviewInput(SchedulingError, ValueError):
    """Caller supplied a quality, modality, or prior state that breaks a precondition."""


class IntegrityMismatch(SchedulingError):
    """Cached state disagrees with the state replayed from the review history."""

    def __init__(self, report: "IntegrityReport") -> None:
        self.report = report
        fields = ", ".join(report.mismatched_fields)
        super().__init__(f"cached scheduling state differs from replay: {fields}")
