"""Confirmation before an action discards a running brew."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Confirmation:
    """What the user is asked; answered with confirm or decline."""

    title: str = "Confirm"
    message: tuple[str, ...] = (
        "There is an active timer.",
        "Cancel it and continue?",
    )
    confirm_label: str = "Yes"
    decline_label: str = "No"


# Resolves True on confirm, False on decline, None when dismissed.
Prompt = Callable[[Confirmation], Awaitable["bool | None"]]


class ConfirmationGate:
    """Asks before a running session is cancelled or replaced."""

    def __init__(self, prompt: Prompt, confirmation: Confirmation | None = None) -> None:
        self._prompt = prompt
        self.confirmation = confirmation if confirmation is not None else Confirmation()

    async def request_cancel_or_replace(self, is_session_active: bool) -> bool:
        """Return whether the caller may go ahead.

        Idle sessions need no confirmation. Otherwise waits, without a
        timeout, for the user; only an explicit confirm returns ``True``.
        """
        if not is_session_active:
            return True
        try:
            answer = await self._prompt(self.confirmation)
        except Exception as exc:
            logger.warning("Confirmation prompt failed, keeping the timer: %s", exc)
            return False
        if answer is None:
            logger.debug("Confirmation dismissed, keeping the timer")
        return answer is True
