"""Shared fixtures for the scheduling engine tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

_SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))


@pytest.fixture
def t0() -> datetime:
    return datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def scheduler():
    from oratoria_srs.config import SrsSettings
    from oratoria_srs.srs import Scheduler

    # .env や SRS_* 環境変数の影響を受けない既定値で固定する
    return Scheduler(SrsSettings(_env_file=None))
