"""Timer engine: the single brewing countdown and its persisted projection."""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from cuppa.core.alarm import AlarmStateStore
from cuppa.core.notifications import NotificationService
from cuppa.core.presets import Preset, PresetConfigError, PresetStore
from cuppa.core.ticker import PeriodicTicker

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Brewing complete..."
NOTIFICATION_BODY = "{name} is now ready!"

Observer = Callable[["Session"], None]


class TimerState(Enum):
    """Possible states of the countdown."""

    IDLE = "idle"
    RUNNING = "running"


def format_timer(seconds: int) -> str:
    """Format *seconds* as ``M:SS``."""
    total = max(int(seconds), 0)
    return f"{total // 60}:{total % 60:02d}"


def remaining_until(end_time_ms: int, now_ms: int) -> int:
    """Whole seconds left before *end_time_ms*, excluding the one-second buffer.

    Never negative. The result depends only on the two instants, so any
    amount of suspension in between yields the right value.
    """
    diff_ms = end_time_ms - now_ms
    return max(-(-diff_ms // 1000) - 1, 0)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Session:
    """The countdown owned by :class:`TimerEngine`.

    ``active`` holds exactly when both ``preset`` and ``end_time`` are set.
    ``end_time`` is wall-clock epoch milliseconds.
    """

    active: bool = False
    preset: Preset | None = None
    end_time: int | None = None
    remaining_seconds: int = 0

    @property
    def state(self) -> TimerState:
        return TimerState.RUNNING if self.active else TimerState.IDLE

    @property
    def fraction_remaining(self) -> float:
        """Share of the brew still to go, 0.0 when idle."""
        if self.preset is None:
            return 0.0
        return min(self.remaining_seconds / self.preset.brew_seconds, 1.0)


class TimerEngine:
    """Owns the one authoritative brewing session.

    Remaining time is always recomputed from the absolute end time, and
    every transition is mirrored to the alarm store so a relaunched process
    can pick the countdown up again with :meth:`resume`. The engine never
    raises to its callers: notification and storage failures are logged
    and the in-process session stays authoritative.

    Parameters
    ----------
    presets : PresetStore
        Source of presets, consulted by :meth:`resume`
    alarms : AlarmStateStore
        Durable store for the active alarm
    notifier : NotificationService
        Delivers the "brewing complete" alert
    ticker : PeriodicTicker | None
        Drives :meth:`tick`; a one-second ticker is created if omitted
    cancel_on_replace : bool
        Cancel the pending alert before scheduling one for a different preset

    """

    def __init__(
        self,
        presets: PresetStore,
        alarms: AlarmStateStore,
        notifier: NotificationService,
        ticker: PeriodicTicker | None = None,
        *,
        cancel_on_replace: bool = False,
    ) -> None:
        self._presets = presets
        self._alarms = alarms
        self._notifier = notifier
        self._ticker = ticker if ticker is not None else PeriodicTicker(1.0)
        self.cancel_on_replace = cancel_on_replace
        self._session = Session()
        self._observers: list[Observer] = []
        # Guards the session and its persisted projection.
        self._lock = threading.RLock()

    # -- public interface ----------------------------------------------------

    @property
    def session(self) -> Session:
        """Return a snapshot of the current session."""
        with self._lock:
            return dataclasses.replace(self._session)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call *observer* with a session snapshot after every change.

        Returns a function that removes the subscription.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def start(self, preset: Preset, remaining_seconds: int | None = None) -> None:
        """Start brewing *preset*, replacing any active session.

        Without *remaining_seconds* this is a fresh brew: the countdown runs
        for the preset's full duration and a new alert is scheduled. With
        it, the countdown runs for that many seconds and no alert is
        scheduled, because one is already pending from before a restart.
        """
        with self._lock:
            now = _now_ms()
            if remaining_seconds is None:
                remaining = preset.brew_seconds
                previous = self._session.preset
                if self.cancel_on_replace and previous is not None and previous.id != preset.id:
                    self._cancel_notification()
                self._schedule_notification(remaining, preset)
            else:
                remaining = remaining_seconds
            self._begin(preset, now + (remaining + 1) * 1000, now)

    def tick(self) -> Session:
        """Recompute the remaining time and finish the brew when it hits zero."""
        with self._lock:
            session = self._session
            if not session.active:
                return self.session
            session.remaining_seconds = remaining_until(session.end_time, _now_ms())
            if session.remaining_seconds <= 0:
                name = session.preset.name
                self._reset()
                logger.info("%s is ready", name)
            snapshot = self.session
            self._publish(snapshot)
            return snapshot

    def cancel(self) -> None:
        """Stop the active brew and withdraw its alert. Idempotent."""
        with self._lock:
            session = self._session
            if not session.active:
                logger.debug("cancel() with no active session")
                return
            name = session.preset.name
            left = remaining_until(session.end_time, _now_ms())
            self._reset()
            self._cancel_notification()
            logger.info("Cancelled %s with %s left", name, format_timer(left))
            self._publish(self.session)

    def resume(self) -> Session:
        """Rehydrate the session from the alarm store after a (re)launch.

        A stale alarm (end time already past) or one naming a preset that no
        longer exists is cleared and the session stays idle. The pending
        alert is left alone in every case.
        """
        with self._lock:
            if self._session.active:
                return self.session
            alarm = self._alarms.get_persisted_alarm()
            if alarm is None:
                return self.session

            now = _now_ms()
            if remaining_until(alarm.end_time_ms, now) <= 0:
                logger.info("Discarding stale alarm for %r", alarm.preset_id)
                self._clear_alarm()
                return self.session

            try:
                presets = self._presets.get_presets()
            except PresetConfigError as exc:
                logger.warning("Cannot resume, presets unavailable: %s", exc)
                return self.session
            preset = next((p for p in presets if p.id == alarm.preset_id), None)
            if preset is None:
                logger.info("Discarding alarm for unknown preset %r", alarm.preset_id)
                self._clear_alarm()
                return self.session

            # Keep the persisted end instant so restarts never drift.
            self._begin(preset, alarm.end_time_ms, now)
            return self.session

    def close(self) -> None:
        """Stop ticking; the persisted alarm is kept for the next launch."""
        self._ticker.stop()

    # -- private helpers -----------------------------------------------------

    def _begin(self, preset: Preset, end_time: int, now: int) -> None:
        """Enter RUNNING with *end_time*, persist, tick and publish."""
        session = self._session
        session.active = True
        session.preset = preset
        session.end_time = end_time
        session.remaining_seconds = remaining_until(end_time, now)
        self._persist(preset.id, end_time)
        self._ticker.start(self.tick)
        logger.info("Brewing %s, %s left", preset.name, format_timer(session.remaining_seconds))
        self._publish(self.session)

    def _reset(self) -> None:
        """Enter IDLE, stop ticking and clear the persisted alarm."""
        session = self._session
        session.active = False
        session.preset = None
        session.end_time = None
        session.remaining_seconds = 0
        self._ticker.stop()
        self._clear_alarm()

    def _publish(self, snapshot: Session) -> None:
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as exc:
                logger.error("Session observer %r failed: %s", observer, exc)

    def _persist(self, preset_id: str, end_time: int) -> None:
        try:
            self._alarms.set_persisted_alarm(preset_id, end_time)
        except OSError as exc:
            logger.warning("Could not persist alarm: %s", exc)

    def _clear_alarm(self) -> None:
        try:
            self._alarms.clear_persisted_alarm()
        except OSError as exc:
            logger.warning("Could not clear alarm: %s", exc)

    def _schedule_notification(self, after_seconds: int, preset: Preset) -> None:
        try:
            self._notifier.schedule(
                after_seconds, NOTIFICATION_TITLE, NOTIFICATION_BODY.format(name=preset.name)
            )
        except Exception as exc:
            logger.warning("Could not schedule alert for %s: %s", preset.name, exc)

    def _cancel_notification(self) -> None:
        try:
            self._notifier.cancel()
        except Exception as exc:
            logger.warning("Could not cancel alert: %s", exc)
