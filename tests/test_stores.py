"""Tests for the preset and alarm stores."""

import dataclasses
import json
from pathlib import Path

import pytest

from cuppa.core.alarm import JsonAlarmStore, PersistedAlarm
from cuppa.core.presets import (
    DEFAULT_PRESETS,
    JsonPresetStore,
    Preset,
    PresetConfigError,
    slugify,
)

# ---------------------------------------------------------------------------
# Preset
# ---------------------------------------------------------------------------


class TestPreset:
    """Presets are validated, immutable records."""

    def test_id_derived_from_name(self) -> None:
        assert Preset(name="Earl Grey", brew_seconds=200).id == "earl-grey"

    def test_explicit_id_kept(self) -> None:
        assert Preset(name="Earl Grey", brew_seconds=200, id="eg").id == "eg"

    def test_is_frozen(self) -> None:
        preset = Preset(name="Black", brew_seconds=240)
        with pytest.raises(dataclasses.FrozenInstanceError):
            preset.brew_seconds = 10  # type: ignore[misc]

    @pytest.mark.parametrize("seconds", [0, -5, 2.5, True, "60"])
    def test_invalid_brew_seconds(self, seconds) -> None:
        with pytest.raises(ValueError):
            Preset(name="Black", brew_seconds=seconds)

    def test_empty_name(self) -> None:
        with pytest.raises(ValueError):
            Preset(name="  ", brew_seconds=60)

    def test_slugify(self) -> None:
        assert slugify("  Rooibos / Honeybush! ") == "rooibos-honeybush"


# ---------------------------------------------------------------------------
# JsonPresetStore
# ---------------------------------------------------------------------------


def _write_presets(config_dir: Path, data) -> None:
    (config_dir / "presets.json").write_text(json.dumps(data))


class TestJsonPresetStore:
    """Presets come from presets.json or the built-in defaults."""

    def test_defaults_when_missing(self, tmp_path: Path) -> None:
        presets = JsonPresetStore(tmp_path).get_presets()
        assert presets == DEFAULT_PRESETS
        assert [(p.id, p.brew_seconds) for p in presets] == [
            ("black", 240),
            ("green", 150),
            ("herbal", 300),
        ]

    def test_reads_file_in_order(self, tmp_path: Path) -> None:
        _write_presets(
            tmp_path,
            [
                {"name": "Oolong", "brew_seconds": 180, "temp_display": "90°C"},
                {"name": "White", "brew_seconds": 120, "id": "silver"},
            ],
        )
        presets = JsonPresetStore(tmp_path).get_presets()
        assert [p.id for p in presets] == ["oolong", "silver"]
        assert presets[0].temp_display == "90°C"

    def test_reread_on_every_call(self, tmp_path: Path) -> None:
        store = JsonPresetStore(tmp_path)
        _write_presets(tmp_path, [{"name": "Oolong", "brew_seconds": 180}])
        assert store.get_presets()[0].name == "Oolong"
        _write_presets(tmp_path, [{"name": "Mate", "brew_seconds": 300}])
        assert store.get_presets()[0].name == "Mate"

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "Oolong"},
            [{"brew_seconds": 180}],
            [{"name": "Oolong", "brew_seconds": 0}],
            ["Oolong"],
            [{"name": "A", "brew_seconds": 60}, {"name": "a", "brew_seconds": 90}],
        ],
    )
    def test_malformed_file(self, tmp_path: Path, data) -> None:
        _write_presets(tmp_path, data)
        with pytest.raises(PresetConfigError):
            JsonPresetStore(tmp_path).get_presets()

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "presets.json").write_text("{not json")
        with pytest.raises(PresetConfigError):
            JsonPresetStore(tmp_path).get_presets()


# ---------------------------------------------------------------------------
# JsonAlarmStore
# ---------------------------------------------------------------------------


class TestJsonAlarmStore:
    """The active alarm is one small JSON document."""

    def test_empty(self, tmp_path: Path) -> None:
        assert JsonAlarmStore(tmp_path).get_persisted_alarm() is None

    def test_set_writes_schema(self, tmp_path: Path) -> None:
        store = JsonAlarmStore(tmp_path / "nested")
        store.set_persisted_alarm("black", 1_700_000_181_000)

        assert json.loads(store.path.read_text()) == {
            "preset_id": "black",
            "end_time_ms": 1_700_000_181_000,
        }
        assert store.get_persisted_alarm() == PersistedAlarm("black", 1_700_000_181_000)

    def test_set_overwrites(self, tmp_path: Path) -> None:
        store = JsonAlarmStore(tmp_path)
        store.set_persisted_alarm("black", 1)
        store.set_persisted_alarm("green", 2)
        assert store.get_persisted_alarm() == PersistedAlarm("green", 2)

    def test_clear_is_idempotent(self, tmp_path: Path) -> None:
        store = JsonAlarmStore(tmp_path)
        store.set_persisted_alarm("black", 1)
        store.clear_persisted_alarm()
        store.clear_persisted_alarm()
        assert store.get_persisted_alarm() is None

    @pytest.mark.parametrize("content", ["", "{", "[]", '{"preset_id": "black"}'])
    def test_unreadable_file_is_absent(self, tmp_path: Path, content: str) -> None:
        (tmp_path / "alarm.json").write_text(content)
        assert JsonAlarmStore(tmp_path).get_persisted_alarm() is None
