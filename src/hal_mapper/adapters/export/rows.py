"""Flat I/O rows shared by the tabular exporters.

One row per hardware channel (modules ordered by rack and slot), one per
fieldbus register (devices in catalog order), then one per application
signal that no mapping references. Row numbers start at 1.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from hal_mapper.domain.model.catalog import MappingStatus

if TYPE_CHECKING:
    from hal_mapper.domain.model.hardware import ApplicationSignal
    from hal_mapper.domain.model.mapping import Configuration, Mapping, SignalScaling

PLACEHOLDER = "—"
ARROW = "→"

_INVALID_VAR_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_LEADING_DIGIT = re.compile(r"^(\d)")
_UNDERSCORE_RUNS = re.compile(r"_{2,}")


class RowSource(str, Enum):
    """Origin of an I/O row."""

    HW = "HW"
    COM = "COM"
    NONE = PLACEHOLDER


@dataclass(frozen=True, slots=True)
class IORow:
    """One line of the I/O traceability list.

    ``clamp`` stays a bool (None without scaling) so each format can render
    it its own way.
    """

    idx: int
    source: RowSource
    rack_or_device: str
    slot_or_address: str
    terminal: str
    tag: str
    hw_signal_type: str
    electrical: str
    status: str
    app_component: str
    app_signal: str
    app_signal_type: str
    app_data_type: str
    scaling_raw: str
    scaling_eng: str
    unit: str
    clamp: bool | None
    filter_ms: str
    grounded: str
    ground_value: str
    sw_variable: str
    notes: str

    @property
    def has_source(self) -> bool:
        return self.source is not RowSource.NONE


def sanitize_var_name(name: str) -> str:
    """Turn a free-form name into an IEC 61131-3 identifier.

    Non ``[A-Za-z0-9_]`` characters become ``_``, a leading digit gets a
    ``_`` prefix and runs of underscores collapse to one.
    """
    name = _INVALID_VAR_CHARS.sub("_", name)
    name = _LEADING_DIGIT.sub(r"_\1", name)
    return _UNDERSCORE_RUNS.sub("_", name)


def variable_name(signal: ApplicationSignal) -> str:
    return sanitize_var_name(f"{signal.component_name}_{signal.signal_name}")


def format_number(value: float | int | None) -> str:
    """Render a number the way it was typed: ``4.0`` -> ``"4"``, ``0.5`` -> ``"0.5"``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_range(low: float, high: float) -> str:
    return f"{format_number(low)}..{format_number(high)}"


def format_scaling(scaling: SignalScaling) -> str:
    """One-line summary, e.g. ``4..20 → 0..10 bar``."""
    summary = (
        f"{format_range(scaling.raw_min, scaling.raw_max)} {ARROW} "
        f"{format_range(scaling.eng_min, scaling.eng_max)} {scaling.unit}"
    )
    return summary.rstrip()


def row_status(mapping: Mapping | None) -> str:
    if mapping is None:
        return MappingStatus.UNMAPPED.value
    if mapping.grounded:
        return MappingStatus.GROUNDED.value
    return mapping.status.value


def _mapped_columns(
    mapping: Mapping | None, signal: ApplicationSignal | None
) -> dict[str, object]:
    scaling = mapping.scaling if mapping else None
    return {
        "status": row_status(mapping),
        "app_component": signal.component_name if signal else "",
        "app_signal": signal.signal_name if signal else "",
        "app_signal_type": signal.signal_type.value if signal else "",
        "app_data_type": signal.data_type if signal else "",
        "scaling_raw": format_range(scaling.raw_min, scaling.raw_max) if scaling else "",
        "scaling_eng": format_range(scaling.eng_min, scaling.eng_max) if scaling else "",
        "unit": scaling.unit if scaling else "",
        "clamp": scaling.clamp_enabled if scaling else None,
        "filter_ms": format_number(scaling.filter_ms) if scaling else "",
        "grounded": "YES" if mapping and mapping.grounded else "",
        "ground_value": mapping.ground_value if mapping else "",
        "sw_variable": variable_name(signal) if signal else "",
        "notes": mapping.notes if mapping else "",
    }


def build_io_rows(config: Configuration, signals: list[ApplicationSignal]) -> list[IORow]:
    """Flatten a configuration into numbered I/O rows.

    Args:
        config: Configuration to flatten
        signals: Application signal catalog

    Returns:
        Rows for channels, then registers, then signals without a mapping
    """
    signals_by_id = {s.id: s for s in signals}
    rows: list[IORow] = []

    def signal_of(mapping: Mapping | None) -> ApplicationSignal | None:
        return signals_by_id.get(mapping.app_signal_id) if mapping else None

    for module in config.sorted_modules():
        for channel in module.channels:
            mapping = config.mapping_for_channel(channel.id)
            rows.append(
                IORow(
                    idx=len(rows) + 1,
                    source=RowSource.HW,
                    rack_or_device=module.rack_id,
                    slot_or_address=f"Slot {module.rack_position}",
                    terminal=channel.terminal,
                    tag=channel.tag,
                    hw_signal_type=channel.signal_type.value,
                    electrical=channel.electrical_type,
                    **_mapped_columns(mapping, signal_of(mapping)),  # type: ignore[arg-type]
                )
            )

    for device in config.devices:
        for register in device.registers:
            mapping = config.mapping_for_register(register.id)
            rows.append(
                IORow(
                    idx=len(rows) + 1,
                    source=RowSource.COM,
                    rack_or_device=device.instance_name,
                    slot_or_address=f"Addr {register.address}",
                    terminal=register.name,
                    tag=register.tag,
                    hw_signal_type=register.signal_type.value,
                    electrical=device.protocol.value,
                    **_mapped_columns(mapping, signal_of(mapping)),  # type: ignore[arg-type]
                )
            )

    for signal in config.unmapped_signals(signals):
        rows.append(
            IORow(
                idx=len(rows) + 1,
                source=RowSource.NONE,
                rack_or_device=PLACEHOLDER,
                slot_or_address=PLACEHOLDER,
                terminal=PLACEHOLDER,
                tag="",
                hw_signal_type="",
                electrical="",
                status=MappingStatus.UNMAPPED.value,
                app_component=signal.component_name,
                app_signal=signal.signal_name,
                app_signal_type=signal.signal_type.value,
                app_data_type=signal.data_type,
                scaling_raw="",
                scaling_eng="",
                unit="",
                clamp=None,
                filter_ms="",
                grounded="",
                ground_value="",
                sw_variable=variable_name(signal),
                notes="No HW/COM source assigned",
            )
        )

    return rows


@dataclass(frozen=True, slots=True)
class ExportTotals:
    """Headline counts shown on covers and report headers."""

    hw_channels: int
    com_registers: int
    app_signals: int
    mapped: int
    grounded: int
    unmapped_signals: int


def compute_totals(config: Configuration, signals: list[ApplicationSignal]) -> ExportTotals:
    return ExportTotals(
        hw_channels=sum(1 for _ in config.channels()),
        com_registers=sum(1 for _ in config.registers()),
        app_signals=len(signals),
        mapped=sum(1 for m in config.mappings if m.status is MappingStatus.MAPPED),
        grounded=sum(1 for m in config.mappings if m.grounded),
        unmapped_signals=len(config.unmapped_signals(signals)),
    )
