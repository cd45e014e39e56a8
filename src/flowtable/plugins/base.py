"""Plugin base class and the per-table plugin manager."""

from typing import Any, Callable, Dict, Iterator

from ..errors import PluginError
from ..events import Event


class Plugin:
    """Something that hooks into a table through its events.

    Subclasses return the handlers they need from `get_events`; the same
    mapping is used to register them in `configure` and to remove them in
    `unconfigure`, so handlers should be bound methods.
    """

    def get_events(self, table) -> Dict[Event, Callable[..., Any]]:
        raise NotImplementedError

    def configure(self, table) -> None:
        for event, handler in self.get_events(table).items():
            table.on(event, handler)

    def unconfigure(self, table) -> None:
        for event, handler in self.get_events(table).items():
            table.un(event, handler)


class PluginManager:
    """Plugins attached to a table, by key.

    Plugins added without a key get the next free integer key, starting at 0.
    """

    def __init__(self, table):
        self.table = table
        self._plugins: Dict[Any, Plugin] = {}

    def _next_key(self) -> int:
        ints = [key for key in self._plugins if isinstance(key, int) and not isinstance(key, bool)]
        return max(ints) + 1 if ints else 0

    def add(self, plugin: Plugin, key: Any = None) -> Any:
        """Configure the plugin on the table and store it. Returns its key."""
        if not isinstance(plugin, Plugin):
            raise PluginError(f"{plugin!r} is not a Plugin")
        if key is None:
            key = self._next_key()
        elif key in self._plugins:
            self.remove(key)
        plugin.configure(self.table)
        self._plugins[key] = plugin
        return key

    def has(self, key: Any) -> bool:
        return key in self._plugins

    def get(self, key: Any) -> Plugin:
        if key not in self._plugins:
            raise PluginError(f"Plugin {key!r} doesn't exist")
        return self._plugins[key]

    def remove(self, key: Any) -> None:
        plugin = self._plugins.pop(key, None)
        if plugin is not None:
            plugin.unconfigure(self.table)

    def items(self):
        return self._plugins.items()

    def __getitem__(self, key: Any) -> Plugin:
        return self.get(key)

    def __setitem__(self, key: Any, plugin: Plugin) -> None:
        self.add(plugin, key)

    def __delitem__(self, key: Any) -> None:
        self.remove(key)

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)
