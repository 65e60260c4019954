import logging

import structlog

from .config import settings


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure structlog for the scheduling engine.

    標準 logging を初期化し、structlog で ISO タイムスタンプとログレベルを付与する。
    `json` が真なら JSON 形式、偽なら開発向けのコンソール形式で出力する。
    引数を省略した場合は `settings` の値を使う。
    """
    level_name = (level or settings.log_level).upper()
    render_json = settings.log_json if json is None else json

    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format="%(message)s")
    renderer = structlog.processors.JSONRenderer() if render_json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger()
