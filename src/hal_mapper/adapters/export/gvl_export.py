"""IEC 61131-3 global variable list (GVL) for CODESYS / e!COCKPIT.

One ``VAR_GLOBAL`` block with three sections: hardware-bound signals,
fieldbus-bound signals (only when devices exist) and grounded signals with
their default value as initializer (only when any are grounded).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hal_mapper.adapters.export.base import GENERATOR, Exporter
from hal_mapper.adapters.export.rows import variable_name

if TYPE_CHECKING:
    from hal_mapper.domain.model.catalog import SignalType
    from hal_mapper.domain.model.mapping import SignalScaling

IEC_TYPES = frozenset(
    {"BOOL", "BYTE", "WORD", "DWORD", "INT", "UINT", "DINT", "UDINT", "REAL", "LREAL", "STRING"}
)

INDENT = "  "


def to_iec_type(
    signal_type: SignalType | str,
    data_type: str | None = None,
    scaling: SignalScaling | None = None,
) -> str:
    """Pick the IEC 61131-3 type of a variable.

    An elementary IEC data type named by ``data_type`` wins (case
    insensitive). Otherwise scaled or analog signals are REAL and
    everything else is BOOL.
    """
    if data_type and data_type.upper() in IEC_TYPES:
        return data_type.upper()
    kind = getattr(signal_type, "value", signal_type)
    if scaling is not None or kind in ("AI", "AO"):
        return "REAL"
    return "BOOL"


class GvlExporter(Exporter):
    """Renders a ``VAR_GLOBAL ... END_VAR`` declaration block."""

    format_name = "gvl"
    extension = "gvl"

    def render(self) -> str:
        lines = [
            f"// Auto-generated by {GENERATOR}",
            f"// Project: {self.project_name} v{self._config.version}",
            f"// Generated: {self._timestamp()}",
            "",
            "VAR_GLOBAL",
            f"{INDENT}// --- Hardware I/O ---",
        ]
        lines.extend(self._hardware_lines())

        if self._config.devices:
            lines.append("")
            lines.append(f"{INDENT}// --- COM / Fieldbus ---")
            lines.extend(self._fieldbus_lines())

        grounded = self._grounded_lines()
        if grounded:
            lines.append("")
            lines.append(f"{INDENT}// --- Grounded (default values) ---")
            lines.extend(grounded)

        lines.append("END_VAR")
        return "\n".join(lines)

    def _hardware_lines(self) -> list[str]:
        lines = []
        for module in self._config.sorted_modules():
            for channel in module.channels:
                mapping = self._config.mapping_for_channel(channel.id)
                signal = self._signals_by_id.get(mapping.app_signal_id) if mapping else None
                if mapping is None or signal is None:
                    continue
                iec_type = to_iec_type(signal.signal_type, signal.data_type, mapping.scaling)
                if channel.tag:
                    comment = f"(* {channel.terminal} | Tag: {channel.tag} *)"
                else:
                    comment = f"(* {channel.terminal} *)"
                lines.append(f"{INDENT}{variable_name(signal)} : {iec_type}; {comment}")
        return lines

    def _fieldbus_lines(self) -> list[str]:
        lines = []
        for device in self._config.devices:
            for register in device.registers:
                mapping = self._config.mapping_for_register(register.id)
                signal = self._signals_by_id.get(mapping.app_signal_id) if mapping else None
                if mapping is None or signal is None:
                    continue
                iec_type = to_iec_type(signal.signal_type, signal.data_type, mapping.scaling)
                comment = (
                    f"(* {device.instance_name}.{register.name} [{device.protocol.value}] *)"
                )
                lines.append(f"{INDENT}{variable_name(signal)} : {iec_type}; {comment}")
        return lines

    def _grounded_lines(self) -> list[str]:
        lines = []
        for mapping in self._config.mappings:
            if not mapping.grounded:
                continue
            signal = self._signals_by_id.get(mapping.app_signal_id)
            if signal is None:
                continue
            iec_type = to_iec_type(signal.signal_type, signal.data_type)
            value = mapping.ground_value or "0"
            lines.append(f"{INDENT}{variable_name(signal)} : {iec_type} := {value}; (* GROUNDED *)")
        return lines
