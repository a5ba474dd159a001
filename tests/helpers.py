"""Shared test doubles and presets."""

from __future__ import annotations

from typing import Sequence

from cuppa.core.presets import Preset

NOW = 1_700_000_000.0
NOW_MS = int(NOW * 1000)

BLACK = Preset(name="Black", brew_seconds=180, temp_display="100°C")
GREEN = Preset(name="Green", brew_seconds=150, temp_display="80°C")


class StaticPresetStore:
    """Preset store over a fixed list."""

    def __init__(self, presets: Sequence[Preset]) -> None:
        self.presets = tuple(presets)

    def get_presets(self) -> tuple[Preset, ...]:
        return self.presets
