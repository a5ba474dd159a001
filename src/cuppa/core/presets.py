"""Brewing presets and the store that loads them."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)

_PRESETS_FILE = "presets.json"
_SLUG_RE = re.compile(r"[^a-z0-9]+")


class PresetConfigError(Exception):
    """Raised when the presets file cannot be turned into presets."""


def slugify(name: str) -> str:
    """Derive a stable identifier from a display *name*."""
    return _SLUG_RE.sub("-", name.lower()).strip("-")


@dataclass(frozen=True)
class Preset:
    """An immutable brewing profile.

    ``color`` and ``icon`` are presentation hints only; the timer never
    looks at them.
    """

    name: str
    brew_seconds: int
    temp_display: str = ""
    color: str = ""
    icon: str = ""
    id: str = field(default="")

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("preset name must not be empty")
        if isinstance(self.brew_seconds, bool) or not isinstance(self.brew_seconds, int):
            raise ValueError(
                f"brew_seconds must be an integer, got {type(self.brew_seconds).__name__}"
            )
        if self.brew_seconds <= 0:
            raise ValueError(f"brew_seconds must be positive, got {self.brew_seconds}")
        if not self.id:
            # Frozen dataclass: bypass __setattr__ for the derived default.
            object.__setattr__(self, "id", slugify(self.name))


DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset(name="Black", brew_seconds=240, temp_display="100°C", color="red", icon="cup-black"),
    Preset(name="Green", brew_seconds=150, temp_display="80°C", color="green", icon="cup-green"),
    Preset(name="Herbal", brew_seconds=300, temp_display="100°C", color="orange", icon="cup-herbal"),
)


class PresetStore(Protocol):
    """Read access to the ordered set of configured presets."""

    def get_presets(self) -> Sequence[Preset]: ...


class JsonPresetStore:
    """Loads presets from ``<config_dir>/presets.json``.

    Falls back to :data:`DEFAULT_PRESETS` when the file does not exist.
    The file is re-read on every call so preference changes replace the
    preset set wholesale.
    """

    def __init__(self, config_dir: Path) -> None:
        self._path = config_dir / _PRESETS_FILE

    def get_presets(self) -> tuple[Preset, ...]:
        if not self._path.exists():
            return DEFAULT_PRESETS

        try:
            raw = json.loads(self._path.read_text())
        except (OSError, ValueError) as exc:
            raise PresetConfigError(f"cannot read {self._path}: {exc}") from exc
        if not isinstance(raw, list):
            raise PresetConfigError(f"{self._path} must contain a list of presets")

        presets = tuple(self._parse(entry) for entry in raw)
        ids = [p.id for p in presets]
        if len(set(ids)) != len(ids):
            raise PresetConfigError(f"{self._path} contains duplicate preset ids")
        logger.debug("Loaded %d presets from %s", len(presets), self._path)
        return presets

    def _parse(self, entry: object) -> Preset:
        if not isinstance(entry, dict):
            raise PresetConfigError(f"preset entry must be an object, got {entry!r}")
        try:
            return Preset(
                name=entry["name"],
                brew_seconds=entry["brew_seconds"],
                temp_display=entry.get("temp_display", ""),
                color=entry.get("color", ""),
                icon=entry.get("icon", ""),
                id=entry.get("id", ""),
            )
        except KeyError as exc:
            raise PresetConfigError(f"preset entry is missing {exc}") from exc
        except ValueError as exc:
            raise PresetConfigError(str(exc)) from exc
