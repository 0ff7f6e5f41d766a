"""Unit tests for the flat I/O rows shared by the tabular exporters."""

from __future__ import annotations

import pytest

from hal_mapper.adapters.export.rows import (
    PLACEHOLDER,
    RowSource,
    build_io_rows,
    compute_totals,
    format_number,
    format_scaling,
    row_status,
    sanitize_var_name,
)
from hal_mapper.application.mapping_manager import MappingManager
from hal_mapper.domain.model.catalog import MappingSource
from hal_mapper.domain.model.mapping import Mapping, SignalScaling


class TestSanitizeVarName:
    """Tests for IEC identifier derivation."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("PumpC_01_Feedback", "PumpC_01_Feedback"),
            ("Pump C-01.Run Cmd", "Pump_C_01_Run_Cmd"),
            ("1st_Stage", "_1st_Stage"),
            ("Tank__Level", "Tank_Level"),
            ("Temp [°C]", "Temp_C_"),
        ],
    )
    def test_sanitize(self, name: str, expected: str) -> None:
        assert sanitize_var_name(name) == expected


class TestFormatting:
    """Tests for number and range formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(4.0, "4"), (0.5, "0.5"), (-50, "-50"), (None, ""), (1e3, "1000")],
    )
    def test_format_number(self, value: float | None, expected: str) -> None:
        assert format_number(value) == expected

    def test_format_scaling(self) -> None:
        scaling = SignalScaling(4, 20, 0, 10, "bar")
        assert format_scaling(scaling) == "4..20 → 0..10 bar"

    def test_row_status(self) -> None:
        bound = Mapping(id="m", source=MappingSource.HW, app_signal_id="s", hw_channel_id="c")
        grounded = Mapping(id="g", source=MappingSource.HW, app_signal_id="s", grounded=True)
        assert row_status(None) == "unmapped"
        assert row_status(bound) == "mapped"
        assert row_status(grounded) == "grounded"


class TestBuildIORows:
    """Tests for row flattening."""

    def test_row_order_and_numbering(self, bound_manager: MappingManager) -> None:
        rows = build_io_rows(bound_manager.config, bound_manager.signals)

        assert [r.idx for r in rows] == list(range(1, 16))
        assert [r.source for r in rows] == (
            [RowSource.HW] * 10 + [RowSource.COM] * 2 + [RowSource.NONE] * 3
        )

    def test_modules_sorted_by_slot(self, bound_manager: MappingManager) -> None:
        bound_manager.config.modules.reverse()
        rows = build_io_rows(bound_manager.config, bound_manager.signals)
        assert rows[0].terminal == "X100:1.1"
        assert rows[9].terminal == "X100:3.2"

    def test_bound_hw_row(self, bound_manager: MappingManager) -> None:
        row = build_io_rows(bound_manager.config, bound_manager.signals)[0]

        assert row.rack_or_device == "X100"
        assert row.slot_or_address == "Slot 1"
        assert row.hw_signal_type == "AI"
        assert row.electrical == "4-20mA"
        assert row.status == "mapped"
        assert (row.app_component, row.app_signal) == ("PumpC_01", "Feedback")
        assert (row.app_signal_type, row.app_data_type) == ("AI", "REAL")
        assert (row.scaling_raw, row.scaling_eng, row.unit) == ("4..20", "0..100", "")
        assert row.clamp is True
        assert row.filter_ms == "0"
        assert row.sw_variable == "PumpC_01_Feedback"
        assert row.grounded == ""

    def test_unbound_hw_row(self, bound_manager: MappingManager) -> None:
        row = build_io_rows(bound_manager.config, bound_manager.signals)[1]

        assert row.status == "unmapped"
        assert row.app_signal == ""
        assert row.clamp is None
        assert row.sw_variable == ""

    def test_com_rows(self, bound_manager: MappingManager) -> None:
        rows = build_io_rows(bound_manager.config, bound_manager.signals)
        running, power = rows[10], rows[11]

        assert running.rack_or_device == "DEIF-AGC-4-1"
        assert running.slot_or_address == "Addr 100"
        assert running.terminal == "GenRunning"
        assert running.electrical == "modbus_tcp"
        assert running.status == "mapped"
        assert running.sw_variable == "Genset_01_Running"
        assert running.scaling_raw == ""
        assert power.status == "unmapped"

    def test_unmapped_signal_rows(self, bound_manager: MappingManager) -> None:
        rows = build_io_rows(bound_manager.config, bound_manager.signals)[12:]

        assert [r.app_signal for r in rows] == ["Running", "SpeedRef", "ActivePower"]
        for row in rows:
            assert not row.has_source
            assert row.rack_or_device == PLACEHOLDER
            assert row.terminal == PLACEHOLDER
            assert row.status == "unmapped"
            assert row.notes == "No HW/COM source assigned"
        assert rows[0].sw_variable == "PumpC_01_Running"

    def test_grounded_signal_has_no_row(self, bound_manager: MappingManager) -> None:
        rows = build_io_rows(bound_manager.config, bound_manager.signals)
        assert "Enable" not in [r.app_signal for r in rows]

    def test_mapping_to_unknown_signal(self, manager: MappingManager) -> None:
        manager.bind("mod_di_ch1", "hw", "sig_not_in_catalog")
        row = build_io_rows(manager.config, manager.signals)[4]

        assert row.status == "mapped"
        assert row.app_signal == ""
        assert row.sw_variable == ""

    def test_empty_configuration(self, manager: MappingManager) -> None:
        manager.config.modules.clear()
        manager.config.devices.clear()
        rows = build_io_rows(manager.config, manager.signals)
        assert len(rows) == 6
        assert all(r.source is RowSource.NONE for r in rows)

    def test_input_not_mutated(self, bound_manager: MappingManager) -> None:
        before = bound_manager.snapshot()
        build_io_rows(bound_manager.config, bound_manager.signals)
        assert bound_manager.config == before


class TestComputeTotals:
    """Tests for headline counts."""

    def test_totals(self, bound_manager: MappingManager) -> None:
        totals = compute_totals(bound_manager.config, bound_manager.signals)

        assert totals.hw_channels == 10
        assert totals.com_registers == 2
        assert totals.app_signals == 6
        assert totals.mapped == 2
        assert totals.grounded == 1
        assert totals.unmapped_signals == 3
