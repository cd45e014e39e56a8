"""Row height computation."""

import re
from typing import Any, Mapping, Optional

from .columns import ColumnDefinition, ColumnRegistry
from .events import Event


BREAK_TAG_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")


def normalize_markup(text: Any) -> str:
    """Turn <br> variants into newlines and drop every other tag.

    Line counting knows nothing about markup, so this is the closest plain
    text equivalent of what a multi-line HTML cell will show.
    """
    if text is None:
        return ""
    return TAG_RE.sub("", BREAK_TAG_RE.sub("\n", str(text)))


class RowHeightCalculator:
    """Computes how tall a row must be to fit all its cells.

    Called once per row during the widow pre-pass and once in the main pass,
    so the result only depends on the row, the registry and the canvas.
    """

    def __init__(self, table):
        self.table = table

    @property
    def columns(self) -> ColumnRegistry:
        return self.table.columns

    def compute_height(self, row: Optional[Mapping[str, Any]], is_header: bool = False) -> float:
        """
        Height of `row`. The header row only takes the column heights into
        account; body renderers and draw functions never see it.
        """
        row = row or {}
        height = float(self.table.column_height)
        for key, definition in self.columns.items():
            height = max(height, float(definition.height))
            if not self._needs_line_count(key, definition, row, is_header):
                continue
            height = max(height, self.cell_height(key, definition, row))
        return height

    def cell_height(self, key: str, definition: ColumnDefinition, row: Mapping[str, Any]) -> float:
        data = row.get(key)
        if data is None:
            data = ""
        if definition.renderer is not None:
            data = definition.renderer(self.table, data, row, key, True)

        override = self.table.trigger(Event.CELL_HEIGHT, [key, data, row], True)
        if override is not None:
            return float(override)

        lines = self.table.canvas.count_lines(
            normalize_markup(data),
            definition.width,
            definition.reset_height,
            definition.auto_padding,
            definition.cell_padding,
            definition.border,
        )
        return lines * float(definition.height)

    @staticmethod
    def _needs_line_count(key: str, definition: ColumnDefinition, row: Mapping[str, Any],
                          is_header: bool = False) -> bool:
        if not definition.multi_line or is_header:
            return False
        return row.get(key) is not None or definition.renderer is not None or definition.draw_fn is not None
