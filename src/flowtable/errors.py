"""Exceptions raised by the table engine."""


class TableError(Exception):
    """Base class for every error raised by flowtable."""


class ConfigurationError(TableError):
    """A table, column or config file is malformed or misused."""


class MissingColumnError(ConfigurationError, KeyError):
    """A column key was referenced that was never added."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Column {key!r} doesn't exist")

    def __str__(self) -> str:
        return self.args[0]


class PluginError(TableError):
    """A plugin lookup or registration failed."""
