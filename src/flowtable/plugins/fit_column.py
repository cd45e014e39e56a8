"""Stretch one column over the width the others leave free."""

import logging
from typing import Any, Callable, Dict, Optional

from ..events import Event
from .base import Plugin


logger = logging.getLogger(__name__)


class FitColumn(Plugin):
    """Give a column whatever width remains once the other columns are placed.

    Args:
        column: key of the stretched column
        max_width: table width; defaults to the page width minus margins
    """

    def __init__(self, column: str, max_width: Optional[float] = None):
        self.column = column
        self.max_width = max_width
        self.width: Optional[float] = None

    def get_events(self, table) -> Dict[Event, Callable[..., Any]]:
        return {Event.BEFORE_BODY: self.set_width}

    def reset_width(self) -> "FitColumn":
        """Forget the computed width so the next body recomputes it."""
        self.width = None
        return self

    def set_max_width(self, width: Optional[float]) -> "FitColumn":
        self.max_width = width
        return self.reset_width()

    def set_width(self, table, rows=None) -> None:
        if self.width is None:
            others = sum(
                definition.width
                for key, definition in table.columns.items()
                if key != self.column
            )
            self.width = self.remaining_width(table, others)
            logger.debug("Column %r fitted to %.2f", self.column, self.width)
        table.set_column_definition(self.column, "width", self.width)

    def remaining_width(self, table, used: float) -> float:
        if self.max_width:
            content_width = self.max_width
        else:
            margins = table.canvas.get_margins()
            content_width = table.canvas.get_page_width() - margins.left - margins.right
        return max(content_width - used, 0.0)
