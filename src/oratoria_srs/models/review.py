from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import OutputModality


VALID_QUALITIES = (0.0, 0.5, 1.0)


def _as_utc(value: datetime) -> datetime:
    # naive な時刻は UTC とみなす
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReviewOutcome(BaseModel):
    """One practice event, appended to the review history.

    復習履歴に1件ずつ追記される採点結果（追記のみ・変更しない）。
    - quality: 0(失敗) | 0.5(部分正解) | 1(正解)
    - output_modality: spoken | typed | flashcard
    - timestamp: 回答時刻
    """

    model_config = ConfigDict(frozen=True)

    quality: float
    output_modality: OutputModality
    timestamp: datetime

    @field_validator("quality")
    @classmethod
    def _check_quality(cls, v: float) -> float:
        if v not in VALID_QUALITIES:
            raise ValueError(f"quality must be one of 0, 0.5, 1 (got {v!r})")
        return float(v)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, v: datetime) -> datetime:
        return _as_utc(v)


class SchedulingState(BaseModel):
    """Per (user, item) scheduling state.

    ReviewOutcome の履歴を畳み込んだ結果のキャッシュ。正は常に履歴側にあり、
    この値は due クエリを高速化するためだけに保存される。
    """

    model_config = ConfigDict(frozen=True)

    ease_factor: float = Field(ge=1.3)
    interval: int = Field(ge=1)
    repetitions: int = Field(ge=0)
    stability: float = Field(ge=0.0)
    difficulty: float = Field(ge=0.0, le=1.0)
    next_review: datetime
    last_review: Optional[datetime] = None

    @field_validator("next_review", "last_review")
    @classmethod
    def _normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return None
        return _as_utc(v)


class IntegrityReport(BaseModel):
    """Result of checking a cached state against a replay of its history."""

    model_config = ConfigDict(frozen=True)

    matches: bool
    authoritative: SchedulingState
    mismatched_fields: tuple[str, ...] = ()


class QueueSummary(BaseModel):
    """Due-queue counts.

    - due_now: 今回のバッチで出題する件数（limit 指定時は上限まで）
    - total_due: 現在時点で期限が来ている総件数（上限なし）
    - overdue: 当日(UTC) 0:00 より前に期限を過ぎた件数
    - new: 一度も復習していない件数
    """

    due_now: int = 0
    total_due: int = 0
    overdue: int = 0
    new: int = 0
