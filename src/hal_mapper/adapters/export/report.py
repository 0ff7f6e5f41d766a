"""Printable HTML traceability report (A3 landscape, print to PDF)."""

from __future__ import annotations

from html import escape

from hal_mapper.adapters.export import palette
from hal_mapper.adapters.export.base import Exporter
from hal_mapper.adapters.export.rows import ARROW, IORow, build_io_rows, compute_totals

REPORT_HEADERS = (
    "#", "Src", "Rack/Device", "Slot/Addr", "Terminal", "Tag", "Type", "Electrical",
    "Status", "Component", "Signal", "App", "Scaling", "SW Variable", "Notes",
)

SIGNAL_CHAIN = (
    "Physical Pin → HW Terminal → Module → HAL Mapping → "
    "Application Signal → Scaling → SW Variable"
)

STYLE = """\
    @page { size: A3 landscape; margin: 12mm; }
    * { box-sizing: border-box; }
    body { font-family: Arial, sans-serif; font-size: 9px; color: #1e293b;
           margin: 0; padding: 16px; }
    .header { display: flex; justify-content: space-between; align-items: flex-end;
              border-bottom: 3px solid #1e3a5f; padding-bottom: 8px; margin-bottom: 12px; }
    .header h1 { margin: 0; font-size: 18px; color: #1e3a5f; }
    .header .meta { text-align: right; font-size: 9px; color: #64748b; }
    .stats { display: flex; gap: 16px; margin-bottom: 12px; }
    .stat { padding: 6px 12px; border-radius: 6px; font-size: 10px; font-weight: 600; }
    table { width: 100%; border-collapse: collapse; font-size: 8px; }
    th { background: #1e3a5f; color: white; padding: 5px 4px; text-align: left;
         font-size: 8px; font-weight: 600; white-space: nowrap; }
    .footer { margin-top: 16px; font-size: 8px; color: #94a3b8;
              border-top: 1px solid #e2e8f0; padding-top: 6px; }
    td { padding: 3px 4px; border-bottom: 1px solid #e2e8f0; vertical-align: middle; }
    @media print { body { padding: 0; } }"""


def _css(color: str) -> str:
    return f"#{color.lower()}"


def badge(text: str, swatch: palette.Swatch) -> str:
    """Inline colored label for signal types and statuses."""
    if not text:
        return ""
    return (
        f'<span style="background:{_css(swatch.fill)};color:{_css(swatch.text)};'
        'padding:1px 6px;border-radius:3px;font-weight:600;font-size:8px">'
        f"{escape(text)}</span>"
    )


def _stat(label: str, swatch: palette.Swatch) -> str:
    return (
        f'    <div class="stat" style="background:{_css(swatch.fill)};'
        f'color:{_css(swatch.text)}">{escape(label)}</div>'
    )


class HtmlReportExporter(Exporter):
    """Renders the I/O rows as a styled, self-contained HTML page."""

    format_name = "html"
    extension = "html"
    filename_suffix = "_IO_List"

    def render(self) -> str:
        rows = build_io_rows(self._config, self._signals)
        totals = compute_totals(self._config, self._signals)
        name = escape(self.project_name)
        version = escape(self._config.version)

        stats = "\n".join(
            [
                _stat(f"HW: {totals.hw_channels} ch", palette.SIGNAL_COLORS["DI"]),
                _stat(f"COM: {totals.com_registers} reg",
                      palette.Swatch(palette.COM_FILL, palette.VARIABLE_TEXT)),
                _stat(f"Mapped: {totals.mapped}", palette.STATUS_COLORS["mapped"]),
                _stat(f"Grounded: {totals.grounded}", palette.STATUS_COLORS["grounded"]),
                _stat(f"Unmapped: {totals.unmapped_signals}", palette.STATUS_COLORS["unmapped"]),
                _stat(f"App Signals: {totals.app_signals}", palette.NEUTRAL),
            ]
        )
        header_cells = "".join(f"<th>{escape(h)}</th>" for h in REPORT_HEADERS)
        body = "\n".join(self._table_row(r) for r in rows)

        return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>I/O Traceability List — {name}</title>
  <style>
{STYLE}
  </style>
</head>
<body>
  <div class="header">
    <div>
      <h1>I/O TRACEABILITY LIST</h1>
      <div style="color:#64748b;font-size:11px">{name} — v{version}</div>
    </div>
    <div class="meta">
      <div>Generated: {self._timestamp()}</div>
      <div>{escape(self._generator())}</div>
    </div>
  </div>

  <div class="stats">
{stats}
  </div>

  <table>
    <thead>
      <tr>{header_cells}</tr>
    </thead>
    <tbody>
{body}
    </tbody>
  </table>

  <div class="footer">
    Signal chain: {SIGNAL_CHAIN}
  </div>
</body>
</html>
"""

    @staticmethod
    def _table_row(r: IORow) -> str:
        background = _css(palette.STRIPE_FILL) if r.idx % 2 == 0 else "#ffffff"
        scaling = f"{r.scaling_raw} {ARROW} {r.scaling_eng} {r.unit}" if r.scaling_raw else ""
        cells = [
            f'<td style="text-align:center;color:#94a3b8">{r.idx}</td>',
            f'<td style="text-align:center;font-weight:600">{escape(r.source.value)}</td>',
            f"<td>{escape(r.rack_or_device)}</td>",
            f"<td>{escape(r.slot_or_address)}</td>",
            f'<td style="font-family:monospace;font-size:8px">{escape(r.terminal)}</td>',
            f"<td>{escape(r.tag)}</td>",
            f'<td style="text-align:center">'
            f"{badge(r.hw_signal_type, palette.signal_swatch(r.hw_signal_type))}</td>",
            f"<td>{escape(r.electrical)}</td>",
            f'<td style="text-align:center">'
            f"{badge(r.status, palette.status_swatch(r.status))}</td>",
            f'<td style="font-weight:500">{escape(r.app_component)}</td>',
            f"<td>{escape(r.app_signal)}</td>",
            f'<td style="text-align:center">'
            f"{badge(r.app_signal_type, palette.signal_swatch(r.app_signal_type))}</td>",
            f"<td>{escape(scaling.rstrip())}</td>",
            '<td style="font-family:Consolas,monospace;font-size:7px;color:#7c3aed">'
            f"{escape(r.sw_variable)}</td>",
            f'<td style="color:#64748b;font-size:7px">{escape(r.notes)}</td>',
        ]
        return f'      <tr style="background:{background}">' + "".join(cells) + "</tr>"
