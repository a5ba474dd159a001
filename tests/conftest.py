"""Fixtures wiring a TimerEngine to a fake clock, ticker and notifier."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cuppa.core.alarm import JsonAlarmStore
from cuppa.core.engine import TimerEngine
from cuppa.core.ticker import PeriodicTicker
from tests.helpers import BLACK, GREEN, NOW, StaticPresetStore


@pytest.fixture()
def clock():
    """Patch the engine's wall clock; advance it via ``clock.time.return_value``."""
    with patch("cuppa.core.engine.time") as mock_time:
        mock_time.time.return_value = NOW
        yield mock_time


@pytest.fixture()
def notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def ticker() -> MagicMock:
    return MagicMock(spec=PeriodicTicker)


@pytest.fixture()
def alarms(tmp_path: Path) -> JsonAlarmStore:
    return JsonAlarmStore(tmp_path)


@pytest.fixture()
def preset_store() -> StaticPresetStore:
    return StaticPresetStore([BLACK, GREEN])


@pytest.fixture()
def engine(clock, preset_store, alarms, notifier, ticker) -> TimerEngine:
    return TimerEngine(preset_store, alarms, notifier, ticker)
