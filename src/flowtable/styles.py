"""Visual style profiles for the ReportLab canvas."""

from dataclasses import dataclass
from typing import Dict
from reportlab.lib.colors import Color, black, HexColor


@dataclass
class CanvasStyle:
    """Fonts and colors used when the canvas draws cells."""
    name: str
    font_family: str  # Base font name (Helvetica, Times-Roman, Courier)
    font_size: float
    line_spacing: float  # Line height as a multiple of font size
    cell_padding: float
    line_width: float
    draw_color: Color  # Borders
    fill_color: Color  # Cell background when fill is on
    text_color: Color

    @property
    def bold_font(self) -> str:
        return get_bold_font(self.font_family)

    @property
    def line_height(self) -> float:
        return self.font_size * self.line_spacing


STYLES: Dict[str, CanvasStyle] = {
    "plain": CanvasStyle(
        name="plain",
        font_family="Helvetica",
        font_size=9,
        line_spacing=1.25,
        cell_padding=3.0,
        line_width=0.5,
        draw_color=black,
        fill_color=HexColor("#E8E8E8"),
        text_color=black,
    ),
    "ledger": CanvasStyle(
        name="ledger",
        font_family="Courier",
        font_size=8,
        line_spacing=1.2,
        cell_padding=2.0,
        line_width=0.75,
        draw_color=black,
        fill_color=HexColor("#D0D0D0"),
        text_color=black,
    ),
    "report": CanvasStyle(
        name="report",
        font_family="Times-Roman",
        font_size=10,
        line_spacing=1.3,
        cell_padding=3.5,
        line_width=0.5,
        draw_color=HexColor("#6B7280"),
        fill_color=HexColor("#F3F6FA"),
        text_color=HexColor("#111827"),
    ),
}


def get_style(name: str) -> CanvasStyle:
    """Get a style by name, with fallback to the plain style."""
    return STYLES.get(name, STYLES["plain"])


def get_bold_font(font_family: str) -> str:
    """Get the bold variant of a font family."""
    if font_family == "Times-Roman":
        return "Times-Bold"
    elif font_family == "Courier":
        return "Courier-Bold"
    else:
        return f"{font_family}-Bold"
