"""Excel I/O traceability workbook.

Sheets:
- Cover: project info and headline counts
- IO List: the full row list with frozen header, auto-filter, rack/device
  separator rows and signal/status color badges
- HW Modules: per-module channel counts
- COM Devices: per-device register counts (only when devices exist)
- Summary: DI/DO/AI/AO breakdown of sources and signals
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from hal_mapper.adapters.export import palette
from hal_mapper.adapters.export.base import GENERATOR, Exporter
from hal_mapper.adapters.export.rows import (
    IORow,
    RowSource,
    build_io_rows,
    compute_totals,
)
from hal_mapper.domain.model.catalog import MappingStatus, SignalType

if TYPE_CHECKING:
    from openpyxl.worksheet.worksheet import Worksheet

    from hal_mapper.domain.model.mapping import Mapping

logger = structlog.get_logger(__name__)

FONT_NAME = "Arial"
SIGNAL_TYPES = (SignalType.DI, SignalType.DO, SignalType.AI, SignalType.AO)

IO_HEADERS: tuple[str, ...] = (
    "#",
    "Source",
    "Rack / Device",
    "Slot / Addr",
    "Terminal / Register",
    "Tag",
    "HW Type",
    "Electrical",
    "Status",
    "App Component",
    "App Signal",
    "App Type",
    "Data Type",
    "Raw Range",
    "Eng Range",
    "Unit",
    "Clamp",
    "Filter (ms)",
    "Grounded",
    "Ground Val",
    "SW Variable",
    "Notes",
)
IO_COLUMN_WIDTHS = (5, 7, 16, 12, 18, 14, 8, 14, 10, 18, 18, 8, 8, 12, 12, 8, 7, 8, 9, 10, 24, 25)

# 1-based columns of the IO List sheet
HW_TYPE_COL = 7
STATUS_COL = 9
APP_TYPE_COL = 12
SW_VARIABLE_COL = 21

HW_MODULE_HEADERS = (
    "Rack", "Slot", "Model", "Module Name", "Channels",
    "DI", "DO", "AI", "AO", "Mapped", "Unmapped",
)
COM_DEVICE_HEADERS = (
    "Device", "Model", "Protocol", "IP", "Port", "Unit ID",
    "Poll (ms)", "Registers", "Mapped", "Unmapped",
)

FIXED_CREATED = datetime(2000, 1, 1)


def _solid(color: str) -> PatternFill:
    return PatternFill(fill_type="solid", fgColor=color)


def _font(size: int = 9, color: str = palette.BODY_TEXT, bold: bool = False) -> Font:
    return Font(name=FONT_NAME, size=size, bold=bold, color=color)


CENTER = Alignment(vertical="center", horizontal="center")
MIDDLE = Alignment(vertical="center")


def _style_header(row: tuple[Any, ...], fill: str, wrap: bool = False) -> None:
    for cell in row:
        cell.font = _font(size=10, color=palette.HEADER_TEXT, bold=True)
        cell.fill = _solid(fill)
        cell.alignment = Alignment(vertical="center", horizontal="center", wrap_text=wrap)


def _cell_value(value: Any) -> Any:
    """Empty strings are written as blank cells."""
    return None if value == "" else value


class WorkbookExporter(Exporter):
    """Renders the I/O traceability list as ``.xlsx`` bytes."""

    format_name = "xlsx"
    extension = "xlsx"
    binary = True
    filename_suffix = "_IO_List"

    def render(self) -> bytes:
        wb = Workbook()
        wb.properties.creator = GENERATOR
        if self._deterministic:
            wb.properties.created = FIXED_CREATED
            wb.properties.modified = FIXED_CREATED

        rows = build_io_rows(self._config, self._signals)

        cover = wb.active
        cover.title = "Cover"
        self._fill_cover(cover)
        self._fill_io_list(wb.create_sheet("IO List"), rows)
        self._fill_hw_modules(wb.create_sheet("HW Modules"))
        if self._config.devices:
            self._fill_com_devices(wb.create_sheet("COM Devices"))
        self._fill_summary(wb.create_sheet("Summary"), rows)

        buffer = io.BytesIO()
        wb.save(buffer)
        logger.debug("Workbook rendered", sheets=wb.sheetnames, rows=len(rows))
        return buffer.getvalue()

    # -- sheets ---------------------------------------------------------------

    def _fill_cover(self, ws: Worksheet) -> None:
        ws.sheet_properties.tabColor = palette.HEADER_FILL
        ws.column_dimensions["A"].width = 5
        ws.column_dimensions["B"].width = 25
        ws.column_dimensions["C"].width = 45

        ws.append([None, "I/O TRACEABILITY LIST", None])
        ws["B1"].font = _font(size=20, color=palette.TITLE_TEXT, bold=True)
        ws.merge_cells("B1:C1")
        ws.append([])

        totals = compute_totals(self._config, self._signals)
        info: list[tuple[str, Any]] = [
            ("Project", self.project_name),
            ("HAL Version", self._config.version),
            ("Description", self._config.description or "—"),
            ("Generated", self._timestamp()),
            ("Generator", self._generator()),
            ("", ""),
            ("Total HW Channels", totals.hw_channels),
            ("Total COM Registers", totals.com_registers),
            ("Total App Signals", totals.app_signals),
            ("Mapped", totals.mapped),
            ("Grounded", totals.grounded),
            ("Unmapped App Signals", totals.unmapped_signals),
        ]
        for label, value in info:
            ws.append([None, _cell_value(label), _cell_value(value)])
            row = ws.max_row
            ws.cell(row=row, column=2).font = _font(size=11, color=palette.LABEL_TEXT, bold=True)
            ws.cell(row=row, column=3).font = _font(size=11, color=palette.BODY_TEXT)

    def _fill_io_list(self, ws: Worksheet, rows: list[IORow]) -> None:
        ws.sheet_properties.tabColor = "3B82F6"
        for col, width in enumerate(IO_COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.append(list(IO_HEADERS))
        ws.row_dimensions[1].height = 28
        _style_header(ws[1], palette.HEADER_FILL, wrap=True)
        for cell in ws[1]:
            cell.border = Border(bottom=Side(style="medium", color="0F172A"))

        ws.freeze_panes = "F2"
        ws.auto_filter.ref = f"A1:{get_column_letter(len(IO_HEADERS))}1"

        row_border = Border(bottom=Side(style="thin", color=palette.SEPARATOR_FILL))
        previous_group = ""
        for r in rows:
            if r.has_source and previous_group and r.rack_or_device != previous_group:
                self._add_separator(ws, len(IO_HEADERS))
            previous_group = r.rack_or_device

            ws.append([_cell_value(v) for v in self._io_values(r)])
            row_idx = ws.max_row
            ws.row_dimensions[row_idx].height = 20

            styled: set[int] = set()
            for col in range(1, len(IO_HEADERS) + 1):
                cell = ws.cell(row=row_idx, column=col)
                cell.font = _font()
                cell.alignment = MIDDLE
                cell.border = row_border

            badges = ((HW_TYPE_COL, r.hw_signal_type), (APP_TYPE_COL, r.app_signal_type))
            for col, signal_type in badges:
                if signal_type in palette.SIGNAL_COLORS:
                    swatch = palette.SIGNAL_COLORS[signal_type]
                    self._badge(ws.cell(row=row_idx, column=col), swatch)
                    styled.add(col)

            if r.status in palette.STATUS_COLORS:
                swatch = palette.STATUS_COLORS[r.status]
                self._badge(ws.cell(row=row_idx, column=STATUS_COL), swatch)
                styled.add(STATUS_COL)

            if r.sw_variable:
                ws.cell(row=row_idx, column=SW_VARIABLE_COL).font = Font(
                    name="Consolas", size=8, color=palette.VARIABLE_TEXT
                )

            if r.idx % 2 == 0:
                for col in range(1, len(IO_HEADERS) + 1):
                    if col not in styled:
                        ws.cell(row=row_idx, column=col).fill = _solid(palette.STRIPE_FILL)

    def _fill_hw_modules(self, ws: Worksheet) -> None:
        ws.sheet_properties.tabColor = "22C55E"
        for col in range(1, len(HW_MODULE_HEADERS) + 1):
            width = 22 if col == 4 else 14 if col == 3 else 10
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.append(list(HW_MODULE_HEADERS))
        _style_header(ws[1], "16A34A")

        for module in self._config.sorted_modules():
            mapped = sum(
                1
                for ch in module.channels
                if self._is_mapped(self._config.mapping_for_channel(ch.id))
            )
            ws.append(
                [
                    module.rack_id,
                    module.rack_position,
                    module.template_model,
                    _cell_value(module.name),
                    len(module.channels),
                    *(module.count(t) for t in SIGNAL_TYPES),
                    mapped,
                    len(module.channels) - mapped,
                ]
            )
            self._style_plain_row(ws, len(HW_MODULE_HEADERS))

    def _fill_com_devices(self, ws: Worksheet) -> None:
        ws.sheet_properties.tabColor = "8B5CF6"
        for col in range(1, len(COM_DEVICE_HEADERS) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 20 if col <= 2 else 12

        ws.append(list(COM_DEVICE_HEADERS))
        _style_header(ws[1], palette.VARIABLE_TEXT)

        for device in self._config.devices:
            mapped = sum(
                1
                for reg in device.registers
                if self._is_mapped(self._config.mapping_for_register(reg.id))
            )
            ws.append(
                [
                    device.instance_name,
                    device.template_model,
                    device.protocol.value,
                    _cell_value(device.ip_address),
                    device.port,
                    device.unit_id,
                    device.poll_rate_ms,
                    len(device.registers),
                    mapped,
                    len(device.registers) - mapped,
                ]
            )
            self._style_plain_row(ws, len(COM_DEVICE_HEADERS))

    def _fill_summary(self, ws: Worksheet, rows: list[IORow]) -> None:
        ws.sheet_properties.tabColor = "F59E0B"
        ws.column_dimensions["A"].width = 5
        ws.column_dimensions["B"].width = 30
        for letter in "CDEF":
            ws.column_dimensions[letter].width = 12

        ws.append([None, "I/O SUMMARY"])
        ws["B1"].font = _font(size=16, color=palette.TITLE_TEXT, bold=True)
        ws.append([])

        ws.append([None, "Category", *(t.value for t in SIGNAL_TYPES)])
        header_row = ws.max_row
        for col in range(2, 7):
            cell = ws.cell(row=header_row, column=col)
            cell.font = _font(size=10, color=palette.HEADER_TEXT, bold=True)
            cell.fill = _solid(palette.HEADER_FILL)
            cell.alignment = Alignment(horizontal="center")

        def count(source: RowSource, mapped_only: bool, signal_type: SignalType) -> int:
            return sum(
                1
                for r in rows
                if r.source is source
                and r.hw_signal_type == signal_type.value
                and (not mapped_only or r.status == MappingStatus.MAPPED.value)
            )

        breakdown = [
            ("HW Channels (total)", [count(RowSource.HW, False, t) for t in SIGNAL_TYPES]),
            ("HW Mapped", [count(RowSource.HW, True, t) for t in SIGNAL_TYPES]),
            ("COM Registers (total)", [count(RowSource.COM, False, t) for t in SIGNAL_TYPES]),
            ("COM Mapped", [count(RowSource.COM, True, t) for t in SIGNAL_TYPES]),
            (
                "App Signals (total)",
                [sum(1 for s in self._signals if s.signal_type is t) for t in SIGNAL_TYPES],
            ),
        ]
        for label, values in breakdown:
            ws.append([None, label, *values])
            row_idx = ws.max_row
            ws.cell(row=row_idx, column=2).font = _font(size=10, color="334155")
            for col in range(3, 7):
                ws.cell(row=row_idx, column=col).font = _font(size=10)
                ws.cell(row=row_idx, column=col).alignment = Alignment(horizontal="center")

    # -- helpers --------------------------------------------------------------

    @staticmethod
    def _is_mapped(mapping: Mapping | None) -> bool:
        return mapping is not None and mapping.status is MappingStatus.MAPPED

    @staticmethod
    def _io_values(r: IORow) -> list[Any]:
        clamp = "" if r.clamp is None else ("Yes" if r.clamp else "No")
        return [
            r.idx, r.source.value, r.rack_or_device, r.slot_or_address, r.terminal,
            r.tag, r.hw_signal_type, r.electrical, r.status,
            r.app_component, r.app_signal, r.app_signal_type, r.app_data_type,
            r.scaling_raw, r.scaling_eng, r.unit, clamp, r.filter_ms,
            r.grounded, r.ground_value, r.sw_variable, r.notes,
        ]

    @staticmethod
    def _badge(cell: Any, swatch: palette.Swatch) -> None:
        cell.fill = _solid(swatch.fill)
        cell.font = _font(color=swatch.text, bold=True)
        cell.alignment = CENTER

    @staticmethod
    def _add_separator(ws: Worksheet, width: int) -> None:
        ws.append([None] * width)
        row_idx = ws.max_row
        ws.row_dimensions[row_idx].height = 4
        for col in range(1, width + 1):
            ws.cell(row=row_idx, column=col).fill = _solid(palette.SEPARATOR_FILL)

    @staticmethod
    def _style_plain_row(ws: Worksheet, width: int) -> None:
        row_idx = ws.max_row
        for col in range(1, width + 1):
            cell = ws.cell(row=row_idx, column=col)
            cell.font = _font()
            cell.alignment = CENTER
