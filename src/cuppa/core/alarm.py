"""Durable marker for the active alarm, so a countdown survives restarts."""

from __future__ import annotations

import fcntl
import json
import logging
from pathlib import Path
from typing import NamedTuple, Protocol

logger = logging.getLogger(__name__)

_ALARM_FILE = "alarm.json"


class PersistedAlarm(NamedTuple):
    """Which preset is brewing and the wall-clock instant it finishes."""

    preset_id: str
    end_time_ms: int


class AlarmStateStore(Protocol):
    """Holds at most one persisted alarm."""

    def get_persisted_alarm(self) -> PersistedAlarm | None: ...

    def set_persisted_alarm(self, preset_id: str, end_time_ms: int) -> None: ...

    def clear_persisted_alarm(self) -> None: ...


class JsonAlarmStore:
    """Persists the active alarm to ``<config_dir>/alarm.json`` with file locking."""

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = config_dir

    @property
    def path(self) -> Path:
        return self._config_dir / _ALARM_FILE

    def get_persisted_alarm(self) -> PersistedAlarm | None:
        """Return the stored alarm, or ``None`` if absent or unreadable."""
        if not self.path.exists():
            return None

        try:
            with open(self.path) as f:
                fcntl.flock(f, fcntl.LOCK_SH)
                data = json.load(f)
            return PersistedAlarm(str(data["preset_id"]), int(data["end_time_ms"]))
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.warning("Ignoring unreadable alarm file %s: %s", self.path, exc)
            return None

    def set_persisted_alarm(self, preset_id: str, end_time_ms: int) -> None:
        self._config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            json.dump({"preset_id": preset_id, "end_time_ms": end_time_ms}, f)

    def clear_persisted_alarm(self) -> None:
        """Remove the stored alarm. Idempotent."""
        self.path.unlink(missing_ok=True)
