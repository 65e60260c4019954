"""SM-2 variant scheduler with three-level grading and modality weighting.

採点は 0(失敗) / 0.5(部分正解) / 1(正解) の三段階。
- 易度係数(EF)の更新式は 0–5 スケールで校正されているため内部で 1→5, 0.5→3, 0→0 に写像する
- 失敗時は repetitions=0, interval=1 にリセットし EF を 0.2 下げる（下限 1.3）
- 安定度(stability)は部分正解で減衰し、発話出力は タイプ入力より 1.2 倍寄与する
- 状態は ReviewOutcome 履歴から常に再計算可能（replay）

現在時刻は引数で受け取り、入力の状態は変更しない。
fold は `srs_fold`、replay は履歴全体で1件の `srs_replay` を debug 出力する。
structlog 未設定のまま使うと debug も標準出力に出るため、呼び出し側で configure_logging() を行うこと。
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from .config import SrsSettings, settings
from .errors import InvalidReviewInput
from .logging import logger
from .models import Outcome, OutputModality, ReviewOutcome, SchedulingState


# quality(0/0.5/1) → SM-2 の 0–5 スケール
_SM2_QUALITY = {0.0: 0, 0.5: 3, 1.0: 5}
_SM2_PASS = 3
FAIL_EASE_PENALTY = 0.2
SECOND_INTERVAL_DAYS = 6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def quality_to_outcome(quality: float) -> Outcome:
    if quality == 0:
        return Outcome.fail
    if quality == 0.5:
        return Outcome.partial
    if quality == 1:
        return Outcome.success
    raise InvalidReviewInput(f"quality must be one of 0, 0.5, 1 (got {quality!r})")


def outcome_to_quality(outcome: Outcome | str) -> float:
    try:
        outcome = Outcome(outcome)
    except ValueError as exc:
        raise InvalidReviewInput(f"unknown outcome: {outcome!r}") from exc
    return {Outcome.fail: 0.0, Outcome.partial: 0.5, Outcome.success: 1.0}[outcome]


def make_outcome(
    quality: float,
    modality: OutputModality | str,
    timestamp: Optional[datetime] = None,
) -> ReviewOutcome:
    """Build a ReviewOutcome from a user-submitted practice result.

    不正な quality / modality は InvalidReviewInput として呼び出し側へ返す。
    timestamp 省略時は現在時刻(UTC)。
    """
    try:
        return ReviewOutcome(
            quality=quality,
            output_modality=modality,
            timestamp=timestamp or _utcnow(),
        )
    except ValidationError as exc:
        raise InvalidReviewInput(str(exc)) from exc


class Scheduler:
    """Deterministic fold of review outcomes into scheduling state.

    係数はすべて SrsSettings から受け取る（未校正のヒューリスティック値）。
    """

    def __init__(self, params: Optional[SrsSettings] = None) -> None:
        self.params = params or settings

    @classmethod
    def from_settings(cls, params: SrsSettings) -> "Scheduler":
        return cls(params)

    def initial_state(self, now: Optional[datetime] = None) -> SchedulingState:
        """Return the state of an item the user has never reviewed (due immediately)."""
        p = self.params
        return SchedulingState(
            ease_factor=p.initial_ease_factor,
            interval=p.initial_interval,
            repetitions=0,
            stability=p.initial_stability,
            difficulty=p.initial_difficulty,
            next_review=now or _utcnow(),
            last_review=None,
        )

    def load_state(
        self,
        cached: SchedulingState | Mapping[str, Any] | None,
        now: Optional[datetime] = None,
    ) -> SchedulingState:
        """Return the cached state, or the initial state when the item was never reviewed.

        ストレージの行(dict)も受け付け、境界値に違反していれば InvalidReviewInput。
        """
        if cached is None:
            return self.initial_state(now)
        if isinstance(cached, SchedulingState):
            return cached
        try:
            return SchedulingState.model_validate(dict(cached))
        except ValidationError as exc:
            raise InvalidReviewInput(str(exc)) from exc

    def fold(self, state: SchedulingState, outcome: ReviewOutcome) -> SchedulingState:
        new_state = self._apply(state, outcome)
        logger.debug(
            "srs_fold",
            quality=outcome.quality,
            modality=outcome.output_modality.value,
            interval_before=state.interval,
            interval_after=new_state.interval,
            ease_factor_after=round(new_state.ease_factor, 4),
            repetitions_after=new_state.repetitions,
            stability_after=round(new_state.stability, 4),
        )
        return new_state

    def _apply(self, state: SchedulingState, outcome: ReviewOutcome) -> SchedulingState:
        p = self.params
        q = _SM2_QUALITY[outcome.quality]

        if q < _SM2_PASS:
            repetitions = 0
            interval = 1
            ease_factor = max(p.min_ease_factor, state.ease_factor - FAIL_EASE_PENALTY)
            stability = state.stability * p.failure_stability_factor
        else:
            if state.repetitions == 0:
                interval = 1
            elif state.repetitions == 1:
                interval = SECOND_INTERVAL_DAYS
            else:
                interval = max(1, _round_half_up(state.interval * state.ease_factor))
            interval = min(p.max_interval_days, interval)
            repetitions = state.repetitions + 1
            ease_factor = max(
                p.min_ease_factor,
                state.ease_factor + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)),
            )
            stability = self._grow_stability(state.stability, outcome)

        return SchedulingState(
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            stability=stability,
            difficulty=state.difficulty,
            next_review=outcome.timestamp + timedelta(days=interval),
            last_review=outcome.timestamp,
        )

    def replay(
        self,
        outcomes: Iterable[ReviewOutcome],
        now: Optional[datetime] = None,
    ) -> SchedulingState:
        """Rebuild the state from the full review history.

        履歴は時刻順に安定ソートしてから畳み込む（同時刻は入力順を保持）。
        `now` は履歴が空のときの next_review にのみ使われる。
        """
        state = self.initial_state(now)
        ordered = sorted(outcomes, key=lambda o: o.timestamp)
        for outcome in ordered:
            state = self._apply(state, outcome)
        logger.debug(
            "srs_replay",
            history_length=len(ordered),
            interval_after=state.interval,
            repetitions_after=state.repetitions,
        )
        return state

    def _grow_stability(self, stability: float, outcome: ReviewOutcome) -> float:
        p = self.params
        weight = p.spoken_weight if outcome.output_modality is OutputModality.spoken else 1.0
        grown = stability * (1.0 + p.stability_gain * weight)
        if outcome.quality == 0.5:
            grown *= p.partial_stability_damping
        return min(p.stability_max, grown)


default_scheduler = Scheduler()


def initial_state(now: Optional[datetime] = None) -> SchedulingState:
    return default_scheduler.initial_state(now)


def load_state(
    cached: SchedulingState | Mapping[str, Any] | None,
    now: Optional[datetime] = None,
) -> SchedulingState:
    return default_scheduler.load_state(cached, now)


def fold(state: SchedulingState, outcome: ReviewOutcome) -> SchedulingState:
    return default_scheduler.fold(state, outcome)


def replay(outcomes: Iterable[ReviewOutcome], now: Optional[datetime] = None) -> SchedulingState:
    return default_scheduler.replay(outcomes, now)
