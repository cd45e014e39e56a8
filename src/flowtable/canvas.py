"""The drawing surface the table talks to, and its ReportLab implementation."""

import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph

from .height import normalize_markup
from .layout import Margins, PageLayout
from .styles import CanvasStyle, get_style


logger = logging.getLogger(__name__)


class Canvas:
    """Everything the table needs from a paginated drawing surface.

    The y cursor grows downward from the top edge of the page. The table never
    measures text itself; it asks `count_lines` and compares the cursor to the
    page break trigger.
    """

    def get_x(self) -> float:
        raise NotImplementedError

    def set_x(self, x: float) -> None:
        raise NotImplementedError

    def get_y(self) -> float:
        raise NotImplementedError

    def set_y(self, y: float) -> None:
        raise NotImplementedError

    def set_xy(self, x: float, y: float) -> None:
        self.set_x(x)
        self.set_y(y)

    def get_page_width(self) -> float:
        raise NotImplementedError

    def get_page_height(self) -> float:
        raise NotImplementedError

    def get_break_margin(self) -> float:
        raise NotImplementedError

    def get_margins(self) -> Margins:
        raise NotImplementedError

    def get_scale_factor(self) -> float:
        """Points per user unit."""
        return 1.0

    def add_page(self) -> None:
        raise NotImplementedError

    def count_lines(self, text: str, width: float, reset_height: bool = True,
                    auto_padding: bool = True, cell_padding: Optional[float] = None,
                    border: Union[int, str] = 0) -> int:
        raise NotImplementedError

    def cell(self, width: float, height: float, text: Any, ln: bool = False,
             border: Union[int, str] = 0, align: str = "L", fill: bool = False, **options) -> None:
        raise NotImplementedError

    def multi_cell(self, width: float, height: float, text: Any, ln: bool = False,
                   border: Union[int, str] = 0, align: str = "L", fill: bool = False, **options) -> None:
        raise NotImplementedError

    def image(self, path: Any, x: float, y: float, width: float, height: float, **options) -> None:
        raise NotImplementedError

    def new_line(self, height: float) -> None:
        raise NotImplementedError

    def get_auto_page_break(self) -> bool:
        raise NotImplementedError

    def set_auto_page_break(self, enabled: bool, margin: float = 0.0) -> None:
        raise NotImplementedError


def truncate_text(text: str, max_width: float, font_name: str, font_size: float, canvas_obj: canvas.Canvas) -> str:
    """Truncate text to fit within max_width, adding '...' if needed."""
    if not text:
        return text

    text_width = canvas_obj.stringWidth(text, font_name, font_size)
    if text_width <= max_width:
        return text

    ellipsis = "..."
    ellipsis_width = canvas_obj.stringWidth(ellipsis, font_name, font_size)
    available_width = max_width - ellipsis_width

    if available_width <= 0:
        return ellipsis[:1]

    for i in range(len(text), 0, -1):
        truncated = text[:i]
        if canvas_obj.stringWidth(truncated, font_name, font_size) <= available_width:
            return truncated + ellipsis

    return ellipsis


def to_color(value: Any) -> Optional[Color]:
    if value is None or isinstance(value, Color):
        return value
    return HexColor("#" + str(value).lstrip("#"))


class ReportLabCanvas(Canvas):
    """Canvas drawing into a ReportLab PDF document."""

    def __init__(
        self,
        target: Any,
        layout: Optional[PageLayout] = None,
        style: Optional[CanvasStyle] = None,
        auto_page_break: bool = True,
        break_margin: Optional[float] = None,
    ):
        self.layout = layout or PageLayout()
        self.style = style or get_style("plain")
        if isinstance(target, Path):
            target = str(target)
        self._canvas = canvas.Canvas(target, pagesize=self.layout.pagesize)
        self._auto_page_break = auto_page_break
        self._break_margin = self.layout.margins.bottom if break_margin is None else break_margin
        self._page_count = 1
        self._x = self.layout.margins.left
        self._y = self.layout.margins.top
        self._font_name = self.style.font_family
        self._font_size = self.style.font_size
        self._fill_color = self.style.fill_color
        self._draw_color = self.style.draw_color
        self._text_color = self.style.text_color
        self._apply_graphics_state()

    @property
    def pdf(self) -> canvas.Canvas:
        """The underlying ReportLab canvas."""
        return self._canvas

    @property
    def page_count(self) -> int:
        return self._page_count

    # Cursor and geometry

    def get_x(self) -> float:
        return self._x

    def set_x(self, x: float) -> None:
        self._x = x

    def get_y(self) -> float:
        return self._y

    def set_y(self, y: float) -> None:
        # like most PDF libraries, setting y also returns to the left margin
        self._x = self.layout.margins.left
        self._y = y

    def set_xy(self, x: float, y: float) -> None:
        self._y = y
        self._x = x

    def get_page_width(self) -> float:
        return self.layout.page_width

    def get_page_height(self) -> float:
        return self.layout.page_height

    def get_break_margin(self) -> float:
        return self._break_margin

    def get_margins(self) -> Margins:
        return self.layout.margins

    def get_auto_page_break(self) -> bool:
        return self._auto_page_break

    def set_auto_page_break(self, enabled: bool, margin: float = 0.0) -> None:
        self._auto_page_break = enabled
        self._break_margin = margin

    def add_page(self) -> None:
        self._canvas.showPage()
        self._page_count += 1
        self._x = self.layout.margins.left
        self._y = self.layout.margins.top
        # showPage() resets the graphics state
        self._apply_graphics_state()

    def new_line(self, height: float) -> None:
        self._x = self.layout.margins.left
        self._y += height

    # Graphics state

    def set_font(self, font_name: str, font_size: Optional[float] = None) -> None:
        self._font_name = font_name
        if font_size is not None:
            self._font_size = font_size
        self._canvas.setFont(self._font_name, self._font_size)

    def set_fill_color(self, color: Any) -> None:
        self._fill_color = to_color(color)

    def set_draw_color(self, color: Any) -> None:
        self._draw_color = to_color(color)

    def set_text_color(self, color: Any) -> None:
        self._text_color = to_color(color)

    def _apply_graphics_state(self) -> None:
        self._canvas.setFont(self._font_name, self._font_size)
        self._canvas.setLineWidth(self.style.line_width)
        self._canvas.setStrokeColor(self._draw_color)
        self._canvas.setFillColor(self._text_color)

    # Text metrics

    def _padding(self, cell_padding: Optional[float], auto_padding: bool, border: Union[int, str]) -> float:
        padding = self.style.cell_padding if cell_padding is None else float(cell_padding)
        if auto_padding and border:
            padding += self.style.line_width / 2
        return padding

    def wrap(self, text: Any, width: float, font_name: Optional[str] = None,
             font_size: Optional[float] = None) -> List[str]:
        """Split text into the lines a cell of `width` would show."""
        font_name = font_name or self._font_name
        font_size = font_size or self._font_size
        lines: List[str] = []
        for paragraph in str(text if text is not None else "").split("\n"):
            split = simpleSplit(paragraph, font_name, font_size, max(width, 1.0))
            lines.extend(split or [""])
        return lines

    def count_lines(self, text: str, width: float, reset_height: bool = True,
                    auto_padding: bool = True, cell_padding: Optional[float] = None,
                    border: Union[int, str] = 0) -> int:
        padding = self._padding(cell_padding, auto_padding, border)
        return len(self.wrap(text, width - 2 * padding))

    # Drawing

    def _font_for(self, options: dict) -> Tuple[str, float]:
        font_name = options.get("font_name") or (
            self.style.bold_font if options.get("bold") else self._font_name
        )
        return font_name, float(options.get("font_size") or self._font_size)

    def _draw_box(self, x: float, top: float, width: float, height: float,
                  border: Union[int, str], fill: bool, options: dict) -> None:
        pdf_bottom = self.layout.to_pdf_y(top + height)
        if fill:
            fill_color = to_color(options.get("fill_color")) or self._fill_color
            self._canvas.setFillColor(fill_color)
            self._canvas.rect(x, pdf_bottom, width, height, stroke=0, fill=1)
            self._canvas.setFillColor(self._text_color)
        if not border:
            return
        self._canvas.setStrokeColor(self._draw_color)
        if border == 1 or border == "1":
            self._canvas.rect(x, pdf_bottom, width, height, stroke=1, fill=0)
            return
        pdf_top = self.layout.to_pdf_y(top)
        sides = str(border).upper()
        if "L" in sides:
            self._canvas.line(x, pdf_top, x, pdf_bottom)
        if "T" in sides:
            self._canvas.line(x, pdf_top, x + width, pdf_top)
        if "R" in sides:
            self._canvas.line(x + width, pdf_top, x + width, pdf_bottom)
        if "B" in sides:
            self._canvas.line(x, pdf_bottom, x + width, pdf_bottom)

    def _draw_line(self, text: str, x: float, baseline: float, width: float,
                   align: str, padding: float) -> None:
        pdf_y = self.layout.to_pdf_y(baseline)
        if align == "R":
            self._canvas.drawRightString(x + width - padding, pdf_y, text)
        elif align == "C":
            self._canvas.drawCentredString(x + width / 2, pdf_y, text)
        else:
            self._canvas.drawString(x + padding, pdf_y, text)

    def _advance(self, width: float, height: float, ln: bool) -> None:
        if ln:
            self.new_line(height)
        else:
            self._x += width

    def _auto_break(self, height: float) -> None:
        if self._auto_page_break and self._y + height > self.layout.page_height - self._break_margin:
            logger.debug("Automatic page break at y=%.2f", self._y)
            self.add_page()

    def cell(self, width: float, height: float, text: Any, ln: bool = False,
             border: Union[int, str] = 0, align: str = "L", fill: bool = False, **options) -> None:
        self._auto_break(height)
        x, top = self._x, self._y
        self._draw_box(x, top, width, height, border, fill, options)

        font_name, font_size = self._font_for(options)
        self._canvas.setFont(font_name, font_size)
        padding = self._padding(options.get("cell_padding"), options.get("auto_padding", True), border)
        text = "" if text is None else str(text).replace("\n", " ")
        if options.get("stretch"):
            text = truncate_text(text, width - 2 * padding, font_name, font_size, self._canvas)

        valign = options.get("valign", "M")
        if valign == "T":
            baseline = top + padding + font_size * 0.8
        elif valign == "B":
            baseline = top + height - padding - font_size * 0.2
        else:
            baseline = top + height / 2 + font_size * 0.35
        if text:
            self._draw_line(text, x, baseline, width, align, padding)

        link = options.get("link")
        if link:
            self._canvas.linkURL(
                link,
                (x, self.layout.to_pdf_y(top + height), x + width, self.layout.to_pdf_y(top)),
                relative=0,
            )
        self._canvas.setFont(self._font_name, self._font_size)
        self._advance(width, height, ln)

    def multi_cell(self, width: float, height: float, text: Any, ln: bool = False,
                   border: Union[int, str] = 0, align: str = "L", fill: bool = False, **options) -> None:
        self._auto_break(height)
        x = self._x + float(options.get("x") or 0)
        top = self._y + float(options.get("y") or 0)
        font_name, font_size = self._font_for(options)
        padding = self._padding(options.get("cell_padding"), options.get("auto_padding", True), border)
        inner_width = width - 2 * padding

        if options.get("is_html"):
            style = ParagraphStyle(
                "cell",
                fontName=font_name,
                fontSize=font_size,
                leading=font_size * self.style.line_spacing,
                textColor=self._text_color,
            )
            paragraph = Paragraph(str(text if text is not None else ""), style)
            _, content_height = paragraph.wrap(inner_width, self.layout.page_height)
            lines = None
        else:
            paragraph = None
            lines = self.wrap(normalize_markup(text), inner_width, font_name, font_size)
            content_height = len(lines) * font_size * self.style.line_spacing

        # the table sizes rows itself, so the box keeps the requested height
        box_height = height if height > 0 else content_height + 2 * padding
        max_height = float(options.get("max_height") or 0)
        if max_height:
            box_height = min(box_height, max_height)
        self._draw_box(x, top, width, box_height, border, fill, options)

        valign = options.get("valign", "M")
        if valign == "T":
            offset = padding
        elif valign == "B":
            offset = box_height - content_height - padding
        else:
            offset = (box_height - content_height) / 2

        if paragraph is not None:
            paragraph.drawOn(self._canvas, x + padding, self.layout.to_pdf_y(top + offset + content_height))
        else:
            self._canvas.setFont(font_name, font_size)
            line_height = font_size * self.style.line_spacing
            for i, line in enumerate(lines):
                baseline = top + offset + i * line_height + font_size * 0.85
                self._draw_line(line, x, baseline, width, align, padding)
            self._canvas.setFont(self._font_name, self._font_size)

        self._advance(width, box_height, ln)

    def image(self, path: Any, x: float, y: float, width: float, height: float, **options) -> None:
        self._canvas.drawImage(
            str(path),
            x,
            self.layout.to_pdf_y(y + height),
            width=width,
            height=height,
            mask=options.get("mask"),
            preserveAspectRatio=bool(options.get("resize")),
        )

    def save(self) -> None:
        """Write the document."""
        self._canvas.save()
        logger.debug("Saved PDF with %d page(s)", self._page_count)
