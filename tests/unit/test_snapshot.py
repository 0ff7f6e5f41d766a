"""Unit tests for the JSON snapshot export and import."""

from __future__ import annotations

import json

import pytest

from hal_mapper import __version__
from hal_mapper.adapters.export import FIXED_TIMESTAMP, JsonSnapshotExporter, parse_snapshot
from hal_mapper.application.mapping_manager import MappingManager
from hal_mapper.config.loader import ConfigurationError
from hal_mapper.domain.model.catalog import MappingSource
from hal_mapper.domain.model.mapping import Mapping, SignalScaling


@pytest.fixture
def snapshot_text(bound_manager: MappingManager) -> str:
    exporter = JsonSnapshotExporter(
        bound_manager.config, bound_manager.signals, deterministic=True
    )
    return exporter.render()


class TestJsonSnapshotExporter:
    """Tests for snapshot rendering."""

    def test_envelope(self, snapshot_text: str) -> None:
        data = json.loads(snapshot_text)

        assert list(data) == ["exported", "generator", "config", "appSignals"]
        assert data["exported"] == FIXED_TIMESTAMP
        assert data["generator"] == f"hal-mapper {__version__}"
        assert len(data["appSignals"]) == 6

    def test_camel_case_keys(self, snapshot_text: str) -> None:
        config = json.loads(snapshot_text)["config"]

        assert config["name"] == "Pump Skid HAL"
        assert "comDevices" in config
        assert config["mappings"][0]["hwChannelId"] == "mod_ai_ch1"
        assert config["mappings"][1]["comRegisterId"] == "reg_run"

    def test_indented_and_unicode(self, bound_manager: MappingManager) -> None:
        bound_manager.retag_channel("mod_ai_ch1", "PT-101", "Druck °C")
        text = JsonSnapshotExporter(bound_manager.config, bound_manager.signals).render()
        assert text.startswith('{\n  "exported"')
        assert "Druck °C" in text

    def test_default_filename(self, bound_manager: MappingManager) -> None:
        exporter = JsonSnapshotExporter(bound_manager.config, [])
        assert exporter.default_filename() == "Pump_Skid_HAL_v0.1.json"


class TestParseSnapshot:
    """Tests for restoring snapshots."""

    def test_round_trip(self, bound_manager: MappingManager, snapshot_text: str) -> None:
        config, signals = parse_snapshot(snapshot_text)

        assert config == bound_manager.config
        assert signals == bound_manager.signals

    def test_restored_manager_revalidates(self, snapshot_text: str) -> None:
        manager = MappingManager(*parse_snapshot(snapshot_text))
        assert manager.config.mapping_for_signal("sig_enable").grounded

    def test_invalid_json(self) -> None:
        with pytest.raises(ConfigurationError, match="Snapshot validation failed"):
            parse_snapshot("{not json")

    def test_missing_sections(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_snapshot('{"generator": "x", "config": {"id": "c"}}')
        assert "exported: Field required" in str(exc_info.value)


class TestInconsistentConfiguration:
    """Snapshots of configurations built without going through the manager."""

    def test_zero_span_scaling(self, bound_manager: MappingManager) -> None:
        config = bound_manager.snapshot()
        config.mappings.append(
            Mapping(
                id="m_flat",
                source=MappingSource.HW,
                app_signal_id="sig_speed",
                hw_channel_id="mod_ao_ch1",
                scaling=SignalScaling(raw_min=4, raw_max=4),
            )
        )

        data = json.loads(JsonSnapshotExporter(config, bound_manager.signals).render())

        scaling = data["config"]["mappings"][-1]["scaling"]
        assert (scaling["rawMin"], scaling["rawMax"]) == (4.0, 4.0)

    def test_empty_name_and_unbound_mapping(self, bound_manager: MappingManager) -> None:
        config = bound_manager.snapshot()
        config.name = ""
        config.mappings.append(
            Mapping(id="m_loose", source=MappingSource.HW, app_signal_id="sig_speed")
        )

        text = JsonSnapshotExporter(config, bound_manager.signals).render()

        data = json.loads(text)
        assert data["config"]["name"] == ""
        assert data["config"]["mappings"][-1]["hwChannelId"] == ""
        with pytest.raises(ConfigurationError):
            parse_snapshot(text)
