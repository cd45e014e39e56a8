"""Alternating row backgrounds."""

from typing import Any, Callable, Dict

from ..events import Event
from .base import Plugin


class StripeRows(Plugin):
    """Fill every other body row.

    Args:
        start_fill: True to fill the first row of each body
        y_offset: how far each row is pushed down, in points, so a filled
            background doesn't hide the bottom border of the previous row
    """

    def __init__(self, start_fill: bool = False, y_offset: float = 0.6):
        self.start_fill = start_fill
        self.y_offset = y_offset
        self._current = not start_fill

    def get_events(self, table) -> Dict[Event, Callable[..., Any]]:
        return {
            Event.BEFORE_BODY: self.reset_fill,
            Event.BEFORE_ROW: self.set_fill,
        }

    def reset_fill(self, table, rows=None) -> None:
        """Every body starts on the same stripe, however many were drawn before."""
        self._current = not self.start_fill

    def set_fill(self, table, row=None, index=None) -> None:
        self._current = not self._current
        for key, definition in table.row_definition.items():
            table.set_row_definition(key, "fill", definition.fill or self._current)
        self.move_y(table)

    def move_y(self, table) -> None:
        if not self.y_offset:
            return
        canvas = table.canvas
        canvas.set_xy(canvas.get_x(), canvas.get_y() + self.y_offset / canvas.get_scale_factor())
