from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest

from prtr_sanctions.common.context import RunContext
from prtr_sanctions.common.time_utils import TAIPEI
from prtr_sanctions.pipeline.store import RecordStore


def crawler_config(docs_dir: str = "docs/sanctions") -> dict:
    return {
        "api": {
            "base_url": "https://prtr.example.test/api/v1/Penalty",
            "timeout": {"connect": 5, "read": 10},
            "max_attempts": 1,
            "headers": {},
            "default_params": {"County": "", "PageNumber": 1, "PageSize": -1},
        },
        "crawl": {
            "period_months": 3,
            "recent_months": 3,
            "max_empty_periods": 3,
            "pacing_seconds": 1.0,
        },
        "storage": {"docs_dir": docs_dir},
    }


class FixedClock:
    def __init__(self, *moments: datetime):
        self.moments = list(moments) or [datetime(2025, 7, 4, 9, 0, 0, tzinfo=TAIPEI)]
        self.calls = 0

    def __call__(self) -> datetime:
        moment = self.moments[min(self.calls, len(self.moments) - 1)]
        self.calls += 1
        return moment


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("tests.prtr_sanctions")


@pytest.fixture
def context(logger, tmp_path: Path) -> RunContext:
    return RunContext(run_id="run-test", logger=logger, config=crawler_config(str(tmp_path / "docs")))


@pytest.fixture
def store(context, tmp_path: Path) -> RecordStore:
    return RecordStore(tmp_path / "docs", context, clock=FixedClock())


@pytest.fixture
def make_clock():
    return FixedClock


@pytest.fixture
def make_config():
    return crawler_config
