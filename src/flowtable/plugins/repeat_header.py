"""Redraw the header at the top of every page the body flows onto."""

from typing import Any, Callable, Dict

from ..events import Event
from .base import Plugin


class RepeatHeader(Plugin):

    def get_events(self, table) -> Dict[Event, Callable[..., Any]]:
        return {Event.AFTER_PAGE_BREAK: self.redraw}

    def redraw(self, table, rows, index, is_widow) -> None:
        # header page breaks carry no index and already draw the header
        if index is None or not table.show_header:
            return
        table.add_header()
