"""Cached-state integrity check.

キャッシュされた SchedulingState と履歴の replay 結果を突き合わせる。
不一致はストレージ破損や fold の取りこぼし/重複を意味し、replay 側を正とする。
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Optional

from .errors import IntegrityMismatch
from .logging import logger
from .models import IntegrityReport, ReviewOutcome, SchedulingState
from .srs import Scheduler, default_scheduler


_FLOAT_FIELDS = ("ease_factor", "stability", "difficulty")
_EXACT_FIELDS = ("interval", "repetitions", "next_review", "last_review")
_REL_TOL = 1e-9


def _diff(cached: SchedulingState, replayed: SchedulingState) -> tuple[str, ...]:
    mismatched: list[str] = []
    for name in _FLOAT_FIELDS:
        if not math.isclose(getattr(cached, name), getattr(replayed, name), rel_tol=_REL_TOL):
            mismatched.append(name)
    for name in _EXACT_FIELDS:
        if getattr(cached, name) != getattr(replayed, name):
            mismatched.append(name)
    return tuple(mismatched)


def verify_state(
    cached: Optional[SchedulingState],
    history: Iterable[ReviewOutcome],
    *,
    strict: bool = False,
    now: Optional[datetime] = None,
    scheduler: Optional[Scheduler] = None,
) -> IntegrityReport:
    """Compare a cached state with the replay of its review history.

    - 一致: matches=True, authoritative は replay 結果
    - 不一致: 警告ログ `srs_integrity_mismatch` を出し、strict なら IntegrityMismatch を送出
    - 履歴もキャッシュも無い場合は一致とみなす
    """
    engine = scheduler or default_scheduler
    outcomes = list(history)

    if cached is None:
        replayed = engine.replay(outcomes, now)
        if not outcomes:
            return IntegrityReport(matches=True, authoritative=replayed)
        mismatched = tuple(_FLOAT_FIELDS + _EXACT_FIELDS)
    else:
        # 空履歴の next_review はキャッシュ側の作成時刻に合わせる（now より優先）
        replayed = engine.replay(outcomes, cached.next_review if not outcomes else now)
        mismatched = _diff(cached, replayed)

    report = IntegrityReport(
        matches=not mismatched,
        authoritative=replayed,
        mismatched_fields=mismatched,
    )
    if report.matches:
        return report

    logger.warning(
        "srs_integrity_mismatch",
        mismatched_fields=list(mismatched),
        history_length=len(outcomes),
        cached_present=cached is not None,
    )
    if strict:
        raise IntegrityMismatch(report)
    return report
