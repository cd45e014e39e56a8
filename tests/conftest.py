"""Shared fixtures: a canvas that records instead of drawing."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import pytest

from flowtable.canvas import Canvas
from flowtable.layout import Margins
from flowtable.table import Table


@dataclass
class Draw:
    kind: str
    page: int
    x: float
    y: float
    width: float
    height: float
    text: Any
    options: Dict[str, Any] = field(default_factory=dict)


class RecordingCanvas(Canvas):
    """A 200 x 100 page, 10 high bottom break margin, 5 everywhere else.

    Text is one line per "\\n" separated paragraph, whatever the width.
    """

    def __init__(self, page_width=200.0, page_height=100.0, break_margin=10.0):
        self.page_width = page_width
        self.page_height = page_height
        self.margins = Margins(left=5.0, top=5.0, right=5.0, bottom=break_margin)
        self.break_margin = break_margin
        self.auto_page_break = True
        self.page = 1
        self.x = self.margins.left
        self.y = self.margins.top
        self.draws: List[Draw] = []
        self.line_counts: List[tuple] = []

    def get_x(self):
        return self.x

    def set_x(self, x):
        self.x = x

    def get_y(self):
        return self.y

    def set_y(self, y):
        self.x = self.margins.left
        self.y = y

    def set_xy(self, x, y):
        self.x, self.y = x, y

    def get_page_width(self):
        return self.page_width

    def get_page_height(self):
        return self.page_height

    def get_break_margin(self):
        return self.break_margin

    def get_margins(self):
        return self.margins

    def add_page(self):
        self.page += 1
        self.x = self.margins.left
        self.y = self.margins.top

    def new_line(self, height):
        self.x = self.margins.left
        self.y += height

    def count_lines(self, text, width, reset_height=True, auto_padding=True, cell_padding=None, border=0):
        self.line_counts.append((text, width))
        return len(str(text).split("\n"))

    def _record(self, kind, width, height, text, options):
        self.draws.append(Draw(kind, self.page, self.x, self.y, width, height, text, options))

    def cell(self, width, height, text, ln=False, border=0, align="L", fill=False, **options):
        options.update(border=border, align=align, fill=fill, ln=ln)
        self._record("cell", width, height, text, options)
        self._advance(width, height, ln)

    def multi_cell(self, width, height, text, ln=False, border=0, align="L", fill=False, **options):
        options.update(border=border, align=align, fill=fill, ln=ln)
        self._record("multi_cell", width, height, text, options)
        self._advance(width, height, ln)

    def image(self, path, x, y, width, height, **options):
        self.draws.append(Draw("image", self.page, x, y, width, height, path, options))

    def _advance(self, width, height, ln):
        if ln:
            self.new_line(height)
        else:
            self.x += width

    def get_auto_page_break(self):
        return self.auto_page_break

    def set_auto_page_break(self, enabled, margin=0.0):
        self.auto_page_break = enabled
        self.break_margin = margin

    # helpers for assertions

    def texts(self, kind=None):
        return [d.text for d in self.draws if kind is None or d.kind == kind]

    def pages_of(self, column_texts):
        """Page each given text was drawn on."""
        return {d.text: d.page for d in self.draws if d.text in column_texts}


@pytest.fixture
def canvas():
    return RecordingCanvas()


@pytest.fixture
def table(canvas):
    return Table(canvas, 10)


def numbered_rows(count, key="a"):
    return [{key: f"row {i}"} for i in range(count)]
