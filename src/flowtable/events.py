"""Event identifiers and the publish/subscribe bus used by the table."""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence


class Event(Enum):
    """Every hook the table exposes.

    The first argument a handler receives is always the table. The payload
    that follows is fixed per event:

    COLUMN_ADDED       key, definition
    BEFORE_BODY        rows                       (return False to skip body)
    AFTER_BODY         rows
    BODY_SKIPPED       rows
    BEFORE_HEADER      -                          (return False to skip header)
    AFTER_HEADER       -
    BEFORE_PAGE_BREAK  rows, index, is_widow      (return False to stay on page)
    AFTER_PAGE_BREAK   rows, index, is_widow
    BEFORE_ROW         row, index                 (return False to skip row)
    AFTER_ROW          row, index
    ROW_SKIPPED        raw_row, index
    ROW_HEIGHT         row, index                 -> height or None
    BEFORE_CELL        key, value, definition, row, is_header -> value or None
    AFTER_CELL         key, value, definition, row, is_header
    CELL_HEIGHT        key, value, row            -> height or None
    """
    COLUMN_ADDED = "column_added"
    BEFORE_BODY = "before_body"
    AFTER_BODY = "after_body"
    BODY_SKIPPED = "body_skipped"
    BEFORE_HEADER = "before_header"
    AFTER_HEADER = "after_header"
    BEFORE_PAGE_BREAK = "before_page_break"
    AFTER_PAGE_BREAK = "after_page_break"
    BEFORE_ROW = "before_row"
    AFTER_ROW = "after_row"
    ROW_SKIPPED = "row_skipped"
    ROW_HEIGHT = "row_height"
    BEFORE_CELL = "before_cell"
    AFTER_CELL = "after_cell"
    CELL_HEIGHT = "cell_height"


Handler = Callable[..., Any]


class EventBus:
    """Ordered handler lists per event, dispatched on behalf of an owner.

    The owner is injected as the first argument of every handler call, and is
    what `on` and `un` return so registrations can be chained.
    """

    def __init__(self, owner: Any = None):
        self.owner = owner
        self._handlers: Dict[Event, List[Handler]] = {}

    def on(self, event: Event, handler: Handler):
        """Append a handler for an event."""
        if not callable(handler):
            raise TypeError(f"Handler for {event} must be callable, got {handler!r}")
        self._handlers.setdefault(event, []).append(handler)
        return self._chain()

    def un(self, event: Event, handler: Optional[Handler] = None):
        """Remove the first handler equal to `handler`, or all of them if None."""
        handlers = self._handlers.get(event)
        if not handlers:
            return self._chain()
        if handler is None:
            del self._handlers[event]
            return self._chain()
        for i, registered in enumerate(handlers):
            if registered == handler:
                del handlers[i]
                break
        return self._chain()

    def handlers(self, event: Event) -> List[Handler]:
        return list(self._handlers.get(event, []))

    def has_handlers(self, event: Event) -> bool:
        return bool(self._handlers.get(event))

    def trigger(self, event: Event, args: Sequence[Any] = (), accept_return: bool = False) -> Any:
        """
        Call every handler of `event` in registration order.

        In veto mode (accept_return=False) a handler returning exactly False
        stops the chain and False is returned; anything else is ignored.
        In override mode the first non-None return stops the chain and is
        returned as is, False included.
        """
        # Copy so a handler registering another one doesn't extend this pass
        for handler in list(self._handlers.get(event, [])):
            result = handler(self.owner, *args)
            if accept_return:
                if result is not None:
                    return result
            elif result is False:
                return False
        return None

    def _chain(self):
        return self.owner if self.owner is not None else self
