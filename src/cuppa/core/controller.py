"""Routes start/cancel requests from buttons and shortcuts to the engine."""

from __future__ import annotations

import logging
from typing import NamedTuple

from cuppa.core.engine import TimerEngine
from cuppa.core.gate import ConfirmationGate
from cuppa.core.presets import Preset, PresetStore

logger = logging.getLogger(__name__)

_SHORTCUT_PREFIX = "shortcut-"


class BrewController:
    """Entry point for every trigger that may start or stop a brew.

    Presets are looked up by id; requests that would discard the running
    brew go through the :class:`ConfirmationGate` first.
    """

    def __init__(self, engine: TimerEngine, gate: ConfirmationGate, presets: PresetStore) -> None:
        self.engine = engine
        self.gate = gate
        self._store = presets
        self._presets: dict[str, Preset] = {}
        self.reload_presets()

    @property
    def presets(self) -> list[Preset]:
        """Configured presets in their configured order."""
        return list(self._presets.values())

    def reload_presets(self) -> None:
        """Replace the preset mapping wholesale from the store."""
        self._presets = {preset.id: preset for preset in self._store.get_presets()}

    async def request_start(self, preset_id: str) -> bool:
        """Start brewing *preset_id*; return whether a brew was started.

        Selecting the preset that is already brewing does nothing.
        """
        preset = self._presets.get(preset_id)
        if preset is None:
            logger.warning("Unknown preset %r", preset_id)
            return False

        session = self.engine.session
        if session.active and session.preset is not None and session.preset.id == preset.id:
            logger.debug("%s is already brewing", preset.name)
            return False

        if not await self.gate.request_cancel_or_replace(session.active):
            logger.info("Kept the running timer, %s not started", preset.name)
            return False
        self.engine.start(preset)
        return True

    async def request_cancel(self) -> bool:
        """Cancel the running brew after confirmation; return whether it was cancelled."""
        session = self.engine.session
        if not await self.gate.request_cancel_or_replace(session.active):
            return False
        self.engine.cancel()
        return session.active


class ShortcutItem(NamedTuple):
    """A home-screen quick action for one preset."""

    type: str
    title: str
    icon: str


class QuickActions:
    """Maps quick-action shortcuts onto preset start requests."""

    def __init__(self, controller: BrewController) -> None:
        self._controller = controller

    def shortcut_items(self) -> list[ShortcutItem]:
        return [
            ShortcutItem(_SHORTCUT_PREFIX + preset.id, preset.name, preset.icon)
            for preset in self._controller.presets
        ]

    async def handle(self, shortcut_type: str | None) -> bool:
        """Start the preset behind *shortcut_type*; unknown types are ignored."""
        if not shortcut_type or not shortcut_type.startswith(_SHORTCUT_PREFIX):
            logger.debug("Ignoring shortcut %r", shortcut_type)
            return False
        return await self._controller.request_start(shortcut_type[len(_SHORTCUT_PREFIX) :])
