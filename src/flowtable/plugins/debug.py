"""Trace table events, optionally limited to a range of rows."""

import dataclasses
import logging
import pprint
import sys
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from ..errors import TableError
from ..events import Event
from .base import Plugin


logger = logging.getLogger(__name__)

DEFAULT_LISTEN = (
    Event.BEFORE_HEADER, Event.AFTER_HEADER,
    Event.BEFORE_PAGE_BREAK, Event.AFTER_PAGE_BREAK,
    Event.BEFORE_ROW, Event.AFTER_ROW, Event.ROW_SKIPPED,
)

# Names given to each event's payload when printed
PAYLOADS: Dict[Event, Tuple[str, ...]] = {
    Event.COLUMN_ADDED: ("column", "definition"),
    Event.BEFORE_BODY: ("rows",),
    Event.AFTER_BODY: ("rows",),
    Event.BODY_SKIPPED: ("rows",),
    Event.BEFORE_HEADER: (),
    Event.AFTER_HEADER: (),
    Event.BEFORE_PAGE_BREAK: ("rows", "row index", "is widow"),
    Event.AFTER_PAGE_BREAK: ("rows", "row index", "is widow"),
    Event.BEFORE_ROW: ("row", "row index"),
    Event.AFTER_ROW: ("row", "row index"),
    Event.ROW_SKIPPED: ("row", "row index"),
    Event.ROW_HEIGHT: ("row", "row index"),
    Event.BEFORE_CELL: ("column", "value", "definition", "row", "is header"),
    Event.AFTER_CELL: ("column", "value", "definition", "row", "is header"),
    Event.CELL_HEIGHT: ("column", "value", "row"),
}


class DebugBoundsExceeded(TableError):
    """Raised when the debugger is told to stop past its row bounds."""


class LogPrinter:
    """Send each traced event to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.log = log or logger
        self.level = level

    def output(self, plugin: "Debug", data: Mapping[str, Any]) -> None:
        event = plugin.event_invoker
        details = ", ".join(f"{name}={value!r}" for name, value in data.items())
        self.log.log(self.level, "[%s] row %d: %s", event.value, plugin.current, details)


class TextPrinter:
    """Pretty-print each traced event to a stream.

    Args:
        stream: where to write, stdout by default
        print_objects: False to print objects as their class name only
        depth: how deep nested containers are printed; None for no limit
    """

    def __init__(self, stream=None, print_objects: bool = False, depth: Optional[int] = None):
        self.stream = stream
        self.print_objects = print_objects
        self.depth = depth

    def output(self, plugin: "Debug", data: Mapping[str, Any]) -> None:
        record = {"event": plugin.event_invoker.value}
        record.update(data if self.print_objects else self.purge_objects(data, 0))
        pprint.pprint(record, stream=self.stream or sys.stdout, depth=self.depth, sort_dicts=False)

    def purge_objects(self, data: Mapping[str, Any], level: int) -> Dict[str, Any]:
        """Replace objects by their class name so the output stays readable."""
        return {key: self._purge(value, level) for key, value in data.items()}

    def _purge(self, value: Any, level: int) -> Any:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        if self.depth is not None and level > self.depth:
            return "..."
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self.purge_objects(
                {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}, level + 1
            )
        if isinstance(value, Mapping):
            return self.purge_objects(value, level + 1)
        if isinstance(value, (list, tuple)):
            return [self._purge(item, level + 1) for item in value]
        return f"<{type(value).__name__}>"


class Debug(Plugin):
    """Print what the table is doing, event by event.

    Args:
        listen: events to print, by default header, page break and row events
        printer: anything with an output(plugin, data) method; LogPrinter by
            default
    """

    def __init__(self, listen: Optional[Iterable[Event]] = None, printer=None):
        self.listen = tuple(listen) if listen else DEFAULT_LISTEN
        self.printer = printer or LogPrinter()
        self.current = 0
        self.event_invoker: Optional[Event] = None
        self._start: Optional[int] = None
        self._length: Optional[int] = None
        self._stop_out_of_bounds = False
        self._bounds_fn: Optional[Callable[["Debug", int], bool]] = None
        # built once so unconfigure() removes the very same handlers
        self._handlers = {event: self._make_handler(event) for event in Event}

    def get_events(self, table) -> Dict[Event, Callable[..., Any]]:
        return dict(self._handlers)

    def set_printer(self, printer) -> "Debug":
        self.printer = printer
        return self

    def set_bounds(self, start: int, length: Optional[int] = None, stop_out_of_bounds: bool = False) -> "Debug":
        """Only print rows from `start`, and at most `length` of them."""
        self._start = start
        self._length = length
        self._stop_out_of_bounds = stop_out_of_bounds
        return self

    def set_bounds_fn(self, fn: Callable[["Debug", int], bool]) -> "Debug":
        """Extra filter called with (plugin, current row index)."""
        self._bounds_fn = fn
        return self

    def _make_handler(self, event: Event) -> Callable[..., None]:
        names = PAYLOADS[event]

        def handler(table, *args):
            self.event_invoker = event
            if self.listens_to(event) and self.in_bounds():
                self.printer.output(self, dict(zip(names, args)))
            if event in (Event.AFTER_ROW, Event.ROW_SKIPPED):
                self.current += 1

        return handler

    def listens_to(self, event: Optional[Event] = None) -> bool:
        event = event or self.event_invoker
        return not self.listen or event in self.listen

    def in_bounds(self) -> bool:
        inside = True
        if self._start is not None:
            inside = self.current >= self._start
            if inside and self._length is not None:
                inside = self.current < self._start + self._length
                if not inside and self._stop_out_of_bounds:
                    raise DebugBoundsExceeded(
                        f"Debug stopped after row {self._start + self._length - 1}"
                    )
        if inside and self._bounds_fn is not None:
            return bool(self._bounds_fn(self, self.current))
        return inside
