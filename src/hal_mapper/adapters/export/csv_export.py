"""Flat CSV export of the I/O traceability list."""

from __future__ import annotations

import csv
import io

from hal_mapper.adapters.export.base import Exporter
from hal_mapper.adapters.export.rows import IORow, build_io_rows

CSV_HEADERS: tuple[str, ...] = (
    "#",
    "Source",
    "Rack/Device",
    "Position/Address",
    "Terminal/Register",
    "Tag",
    "HW Signal Type",
    "Electrical/Protocol",
    "Status",
    "App Component",
    "App Signal",
    "App Signal Type",
    "App Data Type",
    "Scaling Raw",
    "Scaling Eng",
    "Unit",
    "Clamp",
    "Filter (ms)",
    "Grounded",
    "Ground Value",
    "Notes",
)

UNMAPPED_SIGNAL_NOTE = "No HW/COM source"


def csv_cells(row: IORow) -> list[str]:
    """The 21 CSV cells of one row."""
    clamp = "" if row.clamp is None else str(row.clamp).lower()
    notes = row.notes if row.has_source else UNMAPPED_SIGNAL_NOTE
    return [
        str(row.idx),
        row.source.value,
        row.rack_or_device,
        row.slot_or_address,
        row.terminal,
        row.tag,
        row.hw_signal_type,
        row.electrical,
        row.status,
        row.app_component,
        row.app_signal,
        row.app_signal_type,
        row.app_data_type,
        row.scaling_raw,
        row.scaling_eng,
        row.unit,
        clamp,
        row.filter_ms,
        row.grounded,
        row.ground_value,
        notes,
    ]


class CsvExporter(Exporter):
    """Header line plus one line per I/O row, ``\\n`` separated.

    Cells holding a comma, a double quote or a newline are quoted with
    embedded quotes doubled. There is no trailing newline.
    """

    format_name = "csv"
    extension = "csv"

    def render(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
        writer.writerow(CSV_HEADERS)
        for row in build_io_rows(self._config, self._signals):
            writer.writerow(csv_cells(row))
        return buffer.getvalue().removesuffix("\n")
