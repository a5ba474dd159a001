"""One-shot "brewing complete" alerts delivered outside this process."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import sys
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_PID_FILE = "notify.pid"


class NotificationError(Exception):
    """Raised when the platform refuses to schedule or cancel an alert."""


class NotificationService(Protocol):
    """Schedules exactly one future alert and can cancel it."""

    def schedule(self, after_seconds: int, title: str, body: str) -> None: ...

    def cancel(self) -> None: ...


def default_notify_command() -> str:
    """Return the desktop notification command for this platform."""
    if sys.platform == "darwin":
        return "say {body}"
    return "notify-send {title} {body}"


class LoggingNotifier:
    """Notifier that only logs; used when no delivery command is available."""

    def schedule(self, after_seconds: int, title: str, body: str) -> None:
        logger.info("Alert in %ds: %s - %s", after_seconds, title, body)

    def cancel(self) -> None:
        logger.info("Alert cancelled")


class ShellNotifier:
    """Delivers the alert by running a shell command after a delay.

    A detached ``sleep N && <command>`` process is spawned in its own
    session so it outlives this process. Its pid is kept in
    ``<state_dir>/notify.pid``; scheduling again supersedes the pending
    alert, and :meth:`cancel` kills it.

    Parameters
    ----------
    command : str
        Shell template; ``{title}`` and ``{body}`` are replaced with the
        shell-quoted alert text.
    state_dir : Path
        Directory holding the pid file.

    """

    def __init__(self, command: str, state_dir: Path) -> None:
        self.command = command
        self._pid_path = state_dir / _PID_FILE

    def schedule(self, after_seconds: int, title: str, body: str) -> None:
        self._kill_pending()
        line = self.command.format(title=shlex.quote(title), body=shlex.quote(body))
        script = f"sleep {int(after_seconds)} && {line}"
        try:
            proc = subprocess.Popen(  # noqa: S603
                ["/bin/sh", "-c", script],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
            self._pid_path.parent.mkdir(parents=True, exist_ok=True)
            self._pid_path.write_text(str(proc.pid))
        except OSError as exc:
            raise NotificationError(f"cannot schedule alert: {exc}") from exc
        logger.debug("Alert scheduled in %ds (pid %d)", after_seconds, proc.pid)

    def cancel(self) -> None:
        self._kill_pending()

    def _kill_pending(self) -> None:
        """Kill the pending alert process group, if any. Idempotent."""
        try:
            pid = int(self._pid_path.read_text())
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            raise NotificationError(f"cannot read {self._pid_path}: {exc}") from exc

        try:
            os.killpg(pid, signal.SIGTERM)
            logger.debug("Pending alert killed (pid %d)", pid)
        except ProcessLookupError:
            # Already delivered.
            pass
        except OSError as exc:
            raise NotificationError(f"cannot cancel alert {pid}: {exc}") from exc
        finally:
            self._pid_path.unlink(missing_ok=True)


def build_notifier(command: str, state_dir: Path) -> NotificationService:
    """Return a :class:`ShellNotifier`, or a :class:`LoggingNotifier` for ``"-"``."""
    if command == "-":
        return LoggingNotifier()
    return ShellNotifier(command or default_notify_command(), state_dir)
