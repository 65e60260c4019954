from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SrsSettings(BaseSettings):
    """Tunable parameters of the scheduling engine.

    復習スケジューラの調整可能パラメータ。環境変数 `SRS_*` または `.env` から読み込む。
    安定度(stability)関連の係数は未校正のヒューリスティック値であり、
    制御フローに触れずに再校正できるようここへ集約している。
    """

    # --- SM-2 ease / interval ---
    min_ease_factor: float = Field(
        default=1.3,
        description="Floor for the ease factor / 易度係数の下限",
    )
    initial_ease_factor: float = Field(
        default=2.5,
        description="Ease factor of a never-reviewed item / 新規項目の易度係数",
    )
    initial_interval: int = Field(
        default=1,
        ge=1,
        description="Interval (days) of a never-reviewed item / 新規項目の間隔(日)",
    )
    max_interval_days: int = Field(
        default=365,
        ge=1,
        description="Upper cap for the review interval (days) / 復習間隔の上限(日)",
    )

    # --- Stability / difficulty (heuristic, calibrate later) ---
    initial_stability: float = Field(
        default=1.0,
        ge=0.0,
        description="Stability of a never-reviewed item / 新規項目の安定度",
    )
    initial_difficulty: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Difficulty of a never-reviewed item / 新規項目の難易度",
    )
    spoken_weight: float = Field(
        default=1.2,
        description="Stability weight of spoken output relative to typed / 発話出力の重み（タイプ入力比）",
    )
    stability_gain: float = Field(
        default=0.2,
        description="Relative stability growth per successful review / 成功時の安定度増加率",
    )
    partial_stability_damping: float = Field(
        default=0.8,
        description="Multiplier applied to stability on partial credit / 部分正解時の安定度減衰係数",
    )
    stability_max: float = Field(
        default=10.0,
        gt=0.0,
        description="Upper cap for stability / 安定度の上限",
    )
    failure_stability_factor: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Multiplier applied to stability on failure (1.0 = carry forward) / 失敗時の安定度係数",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Root log level / ログレベル",
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON lines / JSON 形式でログ出力するか",
    )

    model_config = SettingsConfigDict(
        env_prefix="SRS_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _check_ranges(self) -> "SrsSettings":
        if self.min_ease_factor < 1.3:
            raise ValueError("SRS_MIN_EASE_FACTOR must be >= 1.3")
        if self.initial_ease_factor < self.min_ease_factor:
            raise ValueError("SRS_INITIAL_EASE_FACTOR must not be below SRS_MIN_EASE_FACTOR")
        if self.max_interval_days < self.initial_interval:
            raise ValueError("SRS_MAX_INTERVAL_DAYS must not be below SRS_INITIAL_INTERVAL")
        if self.spoken_weight < 1.0:
            # 発話 >= タイプ入力 の順序性を崩さないため
            raise ValueError("SRS_SPOKEN_WEIGHT must be >= 1.0")
        if not 0.0 < self.partial_stability_damping <= 1.0:
            raise ValueError("SRS_PARTIAL_STABILITY_DAMPING must be in (0, 1]")
        if self.stability_gain < 0:
            raise ValueError("SRS_STABILITY_GAIN must be >= 0")
        return self


settings = SrsSettings()
