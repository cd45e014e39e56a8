"""The table engine: draws a header and a body of rows onto a canvas.

Page breaks and row heights are handled here rather than by the canvas, so a
row is never split across two pages and the last rows of a body can be kept
together (see WidowGuard). Every step fires an event that plugins can hook
into; see flowtable.events.Event for the full list.

The expensive part is the canvas line count, called once per multi-line
cell of each row. Widow rows reuse the height computed before the body.
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

from .canvas import Canvas
from .columns import ColumnDefinition, ColumnRegistry, RowDefinition
from .errors import ConfigurationError
from .events import Event, EventBus
from .height import RowHeightCalculator
from .pagination import PaginationController, WidowGuard
from .plugins.base import Plugin, PluginManager


logger = logging.getLogger(__name__)

RowTransform = Callable[["Table", Any, int, bool], Optional[Mapping[str, Any]]]


class TableState(Enum):
    CONFIGURING = "configuring"
    BODY_ACTIVE = "body_active"


class Table:
    """A single flowing table with a header row and a body.

    Args:
        canvas: the drawing surface
        column_height: minimum row height, also the line height of
            multi-line cells unless a column says otherwise
        min_widows_on_page: minimum number of rows to keep together at the
            end of a body. 0 disables the check
        footer_height: height reserved under the last rows, so a table
            footer drawn after the body isn't left alone on the last page
    """

    def __init__(
        self,
        canvas: Canvas,
        column_height: float,
        min_widows_on_page: int = 0,
        footer_height: float = 0.0,
        show_header: bool = True,
    ):
        self._canvas = canvas
        self._column_height = float(column_height)
        self.min_widows_on_page = int(min_widows_on_page)
        self.footer_height = float(footer_height)
        self.show_header = show_header
        self.state = TableState.CONFIGURING

        self.events = EventBus(self)
        self.columns = ColumnRegistry(self.events, default_height=self._column_height)
        self.heights = RowHeightCalculator(self)
        self.pagination = PaginationController(self)
        self.widows = WidowGuard(self)
        self.plugins = PluginManager(self)

        self._row_definition = RowDefinition()
        self._row_height = self._column_height

    @property
    def canvas(self) -> Canvas:
        return self._canvas

    # Events

    def on(self, event: Event, handler: Callable[..., Any]) -> "Table":
        return self.events.on(event, handler)

    def un(self, event: Event, handler: Optional[Callable[..., Any]] = None) -> "Table":
        return self.events.un(event, handler)

    def trigger(self, event: Event, args: Iterable[Any] = (), accept_return: bool = False) -> Any:
        return self.events.trigger(event, list(args), accept_return)

    # Plugins

    def add_plugin(self, plugin: Plugin, key: Any = None) -> "Table":
        self.plugins.add(plugin, key)
        return self

    def get_plugin(self, key: Any) -> Optional[Plugin]:
        return self.plugins.get(key) if key in self.plugins else None

    def remove_plugin(self, key: Any) -> "Table":
        self.plugins.remove(key)
        return self

    # Configuration

    @property
    def column_height(self) -> float:
        return self._column_height

    def set_column_height(self, height: float) -> "Table":
        """Minimum row height, applied to columns added from now on."""
        self._column_height = float(height)
        self.columns.default_height = self._column_height
        return self

    def set_footer_height(self, height: float) -> "Table":
        self.footer_height = float(height)
        return self

    def set_show_header(self, show: bool) -> "Table":
        self.show_header = show
        return self

    def set_default_column_definition(self, definition: Mapping[str, Any]) -> "Table":
        """Definition shared by every column added after this call."""
        self.columns.set_defaults(definition)
        return self

    def add_column(self, key: str, definition: Optional[Mapping[str, Any]] = None) -> "Table":
        self.columns.add(key, definition or {})
        return self

    def set_columns(self, columns: Mapping[str, Mapping[str, Any]]) -> "Table":
        for key, definition in columns.items():
            self.add_column(key, definition)
        return self

    def set_column_definition(self, key: str, name: str, value: Any) -> "Table":
        self.columns.set(key, name, value)
        return self

    def get_column(self, key: str) -> ColumnDefinition:
        return self.columns.get(key)

    def get_columns(self):
        return dict(self.columns.items())

    def get_column_width(self, key: str) -> float:
        return self.columns.get(key).width

    def get_column_width_between(self, column_a: str, column_b: str) -> float:
        return self.columns.width_between(column_a, column_b)

    def get_column_width_until(self, column: str) -> float:
        return self.columns.width_until(column)

    def get_column_width_from(self, column: str) -> float:
        return self.columns.width_from(column)

    def get_width(self) -> float:
        return self.columns.width

    # Current row

    @property
    def row_height(self) -> float:
        return self._row_height

    def set_row_height(self, height: float) -> "Table":
        self._row_height = float(height)
        return self

    @property
    def row_definition(self) -> RowDefinition:
        return self._row_definition

    def set_row_definition(self, key: str, name: str, value: Any) -> "Table":
        """Change one attribute of one cell, for the row being drawn only."""
        self._row_definition.set(key, name, value)
        return self

    def restore_row_definition(self, definition: RowDefinition) -> "Table":
        self._row_definition = definition
        return self

    def resolve_row_height(self, row: Mapping[str, Any], index: Optional[int] = None) -> float:
        """Height of a body row: widow cache, then ROW_HEIGHT hook, then computed."""
        cached = self.widows.cached_height(index)
        if cached is not None:
            return cached
        override = self.trigger(Event.ROW_HEIGHT, [row, index], True)
        if override is not None:
            return float(override)
        return self.heights.compute_height(row)

    # Drawing

    def add_body(self, rows: Iterable[Any], transform: Optional[RowTransform] = None) -> "Table":
        """
        Draw the header (if shown) and every row.

        Args:
            rows: the data rows, mappings of column key to value unless a
                transform turns them into such mappings
            transform: called as transform(table, row, index, is_widow_phase);
                returning None skips the row
        """
        if self.state is TableState.BODY_ACTIVE:
            raise ConfigurationError("add_body() can't be called while a body is being drawn")

        rows = list(rows)
        canvas = self._canvas
        auto_page_break = canvas.get_auto_page_break()
        break_margin = canvas.get_break_margin()
        canvas.set_auto_page_break(False, break_margin)
        self.state = TableState.BODY_ACTIVE
        try:
            if self.trigger(Event.BEFORE_BODY, [rows]) is False:
                logger.debug("Body of %d rows skipped", len(rows))
                self.trigger(Event.BODY_SKIPPED, [rows])
                return self

            logger.debug("Drawing body of %d rows", len(rows))
            self.pagination.begin(self.show_header)
            if self.show_header:
                self.add_header()

            self.widows.prepare(rows, transform)
            for index, raw in enumerate(rows):
                row = transform(self, raw, index, False) if transform else raw
                if row is None:
                    logger.debug("Row %d skipped by transform", index)
                    self.widows.on_row_skipped()
                    self.trigger(Event.ROW_SKIPPED, [raw, index])
                    continue
                self.add_row(row, index)

            self.pagination.finish()
            self.trigger(Event.AFTER_BODY, [rows])
        finally:
            self.widows.purge()
            canvas.set_auto_page_break(auto_page_break, break_margin)
            self.state = TableState.CONFIGURING
        return self

    def add_header(self) -> "Table":
        self._row_definition = RowDefinition.snapshot(self.columns)
        self._row_height = self.heights.compute_height({}, is_header=True)
        if self.trigger(Event.BEFORE_HEADER) is False:
            return self

        self.pagination.ensure_header_space(self._row_height)
        header_row = {key: definition.header for key, definition in self._row_definition.items()}
        for key in self._row_definition.keys():
            definition = self._row_definition[key]
            value = definition.header
            if definition.header_renderer is not None:
                value = definition.header_renderer(self, value, header_row, key, False)
            self.add_cell(key, value, header_row, True)
        self.trigger(Event.AFTER_HEADER)
        return self

    def add_row(self, row: Mapping[str, Any], index: Optional[int] = None) -> "Table":
        self._row_definition = RowDefinition.snapshot(self.columns)
        self._row_height = self.resolve_row_height(row, index)
        if self.trigger(Event.BEFORE_ROW, [row, index]) is False:
            return self

        if index is not None:
            self.widows.check(index)
        self.pagination.ensure_row_space(row, index, self._row_height)

        for key in self._row_definition.keys():
            self.add_cell(key, row.get(key), row, False)
        self.trigger(Event.AFTER_ROW, [row, index])
        return self

    def add_cell(self, key: str, value: Any, row: Mapping[str, Any], is_header: bool = False) -> "Table":
        definition = self._row_definition.get(key)
        if definition is None:
            return self
        if value is None:
            value = ""
        if not is_header and definition.renderer is not None:
            value = definition.renderer(self, value, row, key, False)

        replacement = self.trigger(Event.BEFORE_CELL, [key, value, definition, row, is_header], True)
        if replacement is not None:
            value = "" if replacement is False else replacement

        height = self._row_height
        is_last = key == self.columns.last_key()
        if not is_header and definition.draw_fn is not None:
            x = self._canvas.get_x()
            if definition.draw_fn(self, value, definition, key, row):
                if is_last:
                    self._canvas.new_line(height)
                else:
                    self._canvas.set_x(x + definition.width)
            else:
                self._draw_cell(definition, value, height, is_last, is_header)
        else:
            self._draw_cell(definition, value, height, is_last, is_header)

        self.trigger(Event.AFTER_CELL, [key, value, definition, row, is_header])
        return self

    def _draw_cell(self, c: ColumnDefinition, value: Any, height: float, ln: bool, is_header: bool) -> None:
        canvas = self._canvas
        if c.is_image and not is_header:
            x = canvas.get_x()
            if value:
                options = dict(c.options)
                options.update(link=c.link, align=c.align, border=c.border, fit_cell=c.fit_cell)
                canvas.image(value, x + c.x, canvas.get_y() + c.y, c.width, height, **options)
            if ln:
                canvas.new_line(height)
            else:
                canvas.set_x(x + c.width)
            return

        options = dict(c.options)
        options.update(ln=ln, border=c.border, align=c.align, fill=c.fill, valign=c.valign,
                       auto_padding=c.auto_padding, cell_padding=c.cell_padding, stretch=c.stretch)
        if c.multi_line:
            options.update(x=c.x, y=c.y, reset_height=c.reset_height, is_html=c.is_html,
                           max_height=c.max_height, fit_cell=c.fit_cell)
            canvas.multi_cell(c.width, height, value, **options)
        else:
            options.update(link=c.link, ignore_height=c.ignore_height, calign=c.calign)
            canvas.cell(c.width, height, value, **options)
