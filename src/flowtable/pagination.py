"""Page break decisions: plain per-row checks and the widow look-ahead."""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from .events import Event


logger = logging.getLogger(__name__)


class PaginationState(Enum):
    """Where the controller is within one body pass."""
    IDLE = "idle"
    HEADER_PENDING = "header_pending"
    ROW_PENDING = "row_pending"
    DONE = "done"


class PaginationController:
    """Decides whether the pending header or row still fits on the page."""

    def __init__(self, table):
        self.table = table
        self.state = PaginationState.IDLE
        self.current_index: Optional[int] = None

    def begin(self, with_header: bool) -> None:
        self.state = PaginationState.HEADER_PENDING if with_header else PaginationState.ROW_PENDING
        self.current_index = None

    def finish(self) -> None:
        self.state = PaginationState.DONE

    def reset(self) -> None:
        self.state = PaginationState.IDLE
        self.current_index = None

    def page_break_trigger(self, reserved: float = 0.0) -> float:
        """Lowest y that content may reach, minus any reserved height."""
        canvas = self.table.canvas
        return canvas.get_page_height() - canvas.get_break_margin() - reserved

    def overflows(self, height: float, reserved: float = 0.0) -> bool:
        return self.table.canvas.get_y() + height >= self.page_break_trigger(reserved)

    def ensure_header_space(self, height: float) -> bool:
        self.state = PaginationState.HEADER_PENDING
        if self.overflows(height):
            return self.page_break(None, None, False)
        return False

    def ensure_row_space(self, row: Mapping[str, Any], index: int, height: float) -> bool:
        self.state = PaginationState.ROW_PENDING
        self.current_index = index
        if self.overflows(height):
            return self.page_break(row, index, False)
        return False

    def page_break(self, rows: Any, index: Optional[int], is_widow: bool) -> bool:
        """
        Fire the page break events around a canvas page add.

        Handlers may draw a header on the new page, which rebuilds the row
        definition and row height, so both are restored afterwards.

        Returns:
            True if a page was added, False if a handler vetoed it
        """
        table = self.table
        row_height = table.row_height
        row_definition = table.row_definition
        state, current_index = self.state, self.current_index

        added = False
        if table.trigger(Event.BEFORE_PAGE_BREAK, [rows, index, is_widow]) is not False:
            table.canvas.add_page()
            added = True
            logger.debug("Page break before row %s (widow=%s)", index, is_widow)
            table.trigger(Event.AFTER_PAGE_BREAK, [rows, index, is_widow])

        table.set_row_height(row_height)
        table.restore_row_definition(row_definition)
        self.state, self.current_index = state, current_index
        return added


class WidowGuard:
    """Keeps the last rows of a body together on one page.

    Before the body is drawn, the heights of the last `min_widows_on_page`
    rows are computed and summed. When the body reaches one of those rows and
    the rest of the block from that row on can't fit on the current page
    anymore, a page break is forced before it, even if that row alone would
    fit.
    """

    def __init__(self, table):
        self.table = table
        self.block_height = 0.0
        self.count = 0
        self._rows: Optional[List[Any]] = None
        self._heights: Dict[int, float] = {}
        self._done = False

    @property
    def min_widows(self) -> int:
        return int(self.table.min_widows_on_page or 0)

    @property
    def footer_height(self) -> float:
        return float(self.table.footer_height or 0.0)

    def prepare(self, rows: List[Any], transform: Optional[Callable[..., Any]] = None) -> float:
        self._heights = {}
        self._rows = rows
        self._done = False
        self.count = len(rows)
        self.block_height = self._compute_block_height(rows, transform)
        return self.block_height

    def _compute_block_height(self, rows: List[Any], transform: Optional[Callable[..., Any]]) -> float:
        count = len(rows)
        limit = count - self.min_widows
        height = 0.0
        if not self.min_widows or not count or limit < 0:
            return height

        i = count - 1
        while i >= limit and i >= 0:
            data = transform(self.table, rows[i], i, True) if transform else rows[i]
            if data is None:
                # the transform drops this row, so look one row further back
                limit -= 1
            else:
                self._heights[i] = self.table.resolve_row_height(data, i)
                height += self._heights[i]
            i -= 1

        logger.debug(
            "Widow block of %d rows is %.2f high", len(self._heights), height
        )
        return height

    def cached_height(self, index: Optional[int]) -> Optional[float]:
        if index is None:
            return None
        return self._heights.get(index)

    def on_row_skipped(self) -> None:
        self.count -= 1

    def remaining_height(self, index: int) -> float:
        """Height of the cached widow rows from `index` to the end."""
        return sum(height for i, height in self._heights.items() if i >= index)

    def is_widow(self, index: int) -> bool:
        return bool(self.min_widows) and index + self.min_widows >= self.count

    def check(self, index: int) -> bool:
        """Force a page break before `index` if the widow block won't fit.

        Returns:
            True if a page was added
        """
        if self._done or not self.is_widow(index):
            return False
        pagination = self.table.pagination
        if not pagination.overflows(self.remaining_height(index), self.footer_height):
            # the rest of the block fits below this row
            self._done = True
            return False
        self._done = pagination.page_break(self._rows, index, True)
        return self._done

    def purge(self) -> None:
        self._heights = {}
        self._rows = None
