"""Color palette shared by the workbook and the HTML report.

Colors are RGB hex strings without a leading ``#``.
"""

from __future__ import annotations

from typing import NamedTuple


class Swatch(NamedTuple):
    fill: str
    text: str


SIGNAL_COLORS: dict[str, Swatch] = {
    "DI": Swatch("DBEAFE", "2563EB"),
    "DO": Swatch("DCFCE7", "16A34A"),
    "AI": Swatch("FEF3C7", "D97706"),
    "AO": Swatch("FEE2E2", "DC2626"),
}

STATUS_COLORS: dict[str, Swatch] = {
    "mapped": Swatch("DCFCE7", "15803D"),
    "grounded": Swatch("FEF3C7", "B45309"),
    "unmapped": Swatch("FEE2E2", "DC2626"),
}

NEUTRAL = Swatch("F1F5F9", "334155")

HEADER_FILL = "1E3A5F"
HEADER_TEXT = "FFFFFF"
TITLE_TEXT = "1E3A5F"
LABEL_TEXT = "475569"
BODY_TEXT = "1E293B"
MUTED_TEXT = "64748B"
SEPARATOR_FILL = "E2E8F0"
STRIPE_FILL = "F8FAFC"
VARIABLE_TEXT = "7C3AED"
COM_FILL = "F3E8FF"


def signal_swatch(signal_type: str) -> Swatch:
    return SIGNAL_COLORS.get(signal_type, NEUTRAL)


def status_swatch(status: str) -> Swatch:
    return STATUS_COLORS.get(status, NEUTRAL)
