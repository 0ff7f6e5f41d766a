"""Export formats for HAL configurations.

Each format is an ``Exporter`` subclass registered under its format key:

- xml: hierarchical WAGO configuration document
- csv: flat I/O traceability list
- json: lossless snapshot (see ``parse_snapshot``)
- gvl: IEC 61131-3 global variable list
- xlsx: styled workbook
- html: printable traceability report
"""

from __future__ import annotations

from hal_mapper.adapters.export.base import FIXED_TIMESTAMP, GENERATOR, Exporter
from hal_mapper.adapters.export.csv_export import CSV_HEADERS, CsvExporter
from hal_mapper.adapters.export.gvl_export import GvlExporter, to_iec_type
from hal_mapper.adapters.export.report import HtmlReportExporter
from hal_mapper.adapters.export.rows import IORow, RowSource, build_io_rows, sanitize_var_name
from hal_mapper.adapters.export.snapshot import JsonSnapshotExporter, parse_snapshot
from hal_mapper.adapters.export.workbook import WorkbookExporter
from hal_mapper.adapters.export.xml_export import XmlExporter

EXPORTERS: dict[str, type[Exporter]] = {
    exporter.format_name: exporter
    for exporter in (
        XmlExporter,
        CsvExporter,
        JsonSnapshotExporter,
        GvlExporter,
        WorkbookExporter,
        HtmlReportExporter,
    )
}


def get_exporter(format_name: str) -> type[Exporter]:
    """Look up an exporter class by format key.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        return EXPORTERS[format_name.lower()]
    except KeyError:
        known = ", ".join(EXPORTERS)
        raise ValueError(
            f"Unknown export format '{format_name}' (expected one of: {known})"
        ) from None


__all__ = [
    "CSV_HEADERS",
    "EXPORTERS",
    "FIXED_TIMESTAMP",
    "GENERATOR",
    "CsvExporter",
    "Exporter",
    "GvlExporter",
    "HtmlReportExporter",
    "IORow",
    "JsonSnapshotExporter",
    "RowSource",
    "WorkbookExporter",
    "XmlExporter",
    "build_io_rows",
    "get_exporter",
    "parse_snapshot",
    "sanitize_var_name",
    "to_iec_type",
]
