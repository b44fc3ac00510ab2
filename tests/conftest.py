from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import dispatchboard.core.logger as core_logger


@pytest.fixture(autouse=True)
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep logs and slots of every test inside its own temporary root."""

    for key in (
        "DISPATCHBOARD_ROOT",
        "DISPATCHBOARD_CONFIG",
        "DISPATCHBOARD_SLOT",
        "DISPATCHBOARD_POLL_MS",
        "DISPATCHBOARD_APPROACHING_SECONDS",
        "DISPATCHBOARD_COLUMNS_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    root = tmp_path / "board"
    monkeypatch.setenv("DISPATCHBOARD_ROOT", str(root))
    monkeypatch.setattr(core_logger, "_LOGGER", None)
    return root


class FakeClock:
    """Callable clock advanced manually by tests."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 14, 5, 0, tzinfo=timezone.utc))

