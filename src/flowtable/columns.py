"""Column definitions, the ordered column registry and per-row working copies."""

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError, MissingColumnError
from .events import Event, EventBus


VALID_ALIGNMENTS = ("L", "C", "R", "J")
CALLBACK_FIELDS = ("renderer", "header_renderer", "draw_fn")


@dataclass
class ColumnDefinition:
    """Rendering attributes for one column."""
    width: float = 10.0
    height: Optional[float] = None  # None until merged: takes the table row height
    border: Union[int, str] = 0  # 0, 1 or any combination of "LTRB"
    align: str = "L"
    fill: bool = False
    multi_line: bool = False
    is_image: bool = False
    is_html: bool = False
    renderer: Optional[Callable[..., Any]] = None
    header: str = ""
    header_renderer: Optional[Callable[..., Any]] = None
    draw_fn: Optional[Callable[..., bool]] = None
    # single-line cell
    link: str = ""
    stretch: int = 0
    ignore_height: bool = False
    calign: str = "T"
    valign: str = "M"
    # multi-line cell
    x: float = 0.0
    y: float = 0.0
    reset_height: bool = True
    max_height: float = 0.0
    auto_padding: bool = True
    fit_cell: bool = False
    # line counting
    cell_padding: Optional[float] = None
    # anything else is handed to the canvas primitives untouched
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def merge(cls, *layers: Optional[Mapping[str, Any]], default_height: float = 0.0) -> "ColumnDefinition":
        """
        Build a definition from layers of overrides, later layers winning.

        Keys that are not dataclass fields are collected in `options`.
        """
        known = set(cls.field_names()) - {"options"}
        values: Dict[str, Any] = {"height": default_height}
        options: Dict[str, Any] = {}
        for layer in layers:
            if layer is None:
                continue
            if not isinstance(layer, Mapping):
                raise ConfigurationError(
                    f"Column definition must be a mapping, got {type(layer).__name__}"
                )
            for name, value in layer.items():
                if name == "options":
                    if not isinstance(value, Mapping):
                        raise ConfigurationError("Column 'options' must be a mapping")
                    options.update(value)
                elif name in known:
                    values[name] = value
                else:
                    options[name] = value
        definition = cls(options=options, **values)
        definition.validate()
        return definition

    def validate(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"Column {name} must be a number, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"Column {name} can't be negative, got {value!r}")
        if self.align not in VALID_ALIGNMENTS:
            raise ConfigurationError(
                f"Column align must be one of {', '.join(VALID_ALIGNMENTS)}, got {self.align!r}"
            )
        for name in CALLBACK_FIELDS:
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise ConfigurationError(f"Column {name} must be callable, got {value!r}")

    def set(self, name: str, value: Any) -> None:
        """Update one attribute; unknown names land in `options`."""
        if name == "options":
            raise ConfigurationError("Replace single options, not the whole mapping")
        if name in self.field_names():
            previous = getattr(self, name)
            setattr(self, name, value)
            try:
                self.validate()
            except ConfigurationError:
                setattr(self, name, previous)
                raise
        else:
            self.options[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        if name != "options" and name in self.field_names():
            return getattr(self, name)
        return self.options.get(name, default)

    def copy(self) -> "ColumnDefinition":
        return replace(self, options=copy.copy(self.options))


class ColumnRegistry:
    """Ordered column key -> definition mapping, plus width arithmetic.

    Order is insertion order; it drives left-to-right drawing and every
    width range computation.
    """

    def __init__(self, events: Optional[EventBus] = None, default_height: float = 0.0):
        self.events = events
        self.default_height = default_height
        self._defaults: Dict[str, Any] = {}
        self._columns: Dict[str, ColumnDefinition] = {}

    def set_defaults(self, definition: Mapping[str, Any]) -> None:
        """Table-wide defaults, applied to columns added from now on."""
        if not isinstance(definition, Mapping):
            raise ConfigurationError(
                f"Default column definition must be a mapping, got {type(definition).__name__}"
            )
        self._defaults = dict(definition)

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def add(self, key: str, overrides: Optional[Mapping[str, Any]] = None) -> ColumnDefinition:
        definition = ColumnDefinition.merge(
            self._defaults, overrides, default_height=self.default_height
        )
        self._columns[key] = definition
        if self.events is not None:
            self.events.trigger(Event.COLUMN_ADDED, [key, definition])
        return definition

    def get(self, key: str) -> ColumnDefinition:
        try:
            return self._columns[key]
        except KeyError:
            raise MissingColumnError(key) from None

    def set(self, key: str, name: str, value: Any) -> None:
        self.get(key).set(name, value)

    def keys(self) -> List[str]:
        return list(self._columns)

    def last_key(self) -> Optional[str]:
        return next(reversed(self._columns), None)

    def items(self):
        return self._columns.items()

    def __contains__(self, key) -> bool:
        return key in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def width_between(self, column_a: str, column_b: str) -> float:
        """
        Width from column A to column B, both included.

        Example: width_between('B', 'D')

            | A | B | C | D | E |
            |   |-> | ->| ->|   |

        An empty A sums from the start and stops before B (B excluded). An
        empty B sums to the end. Keys that match nothing simply never start
        or stop the scan.
        """
        width = 0.0
        check = False
        for key, definition in self._columns.items():
            if not column_a or key == column_a:
                check = True
            if not column_a and key == column_b:
                break
            if check:
                width += definition.width
            if key == column_b:
                break
        return width

    def width_until(self, column: str) -> float:
        """Width of every column before `column`, which is excluded."""
        return self.width_between("", column)

    def width_from(self, column: str) -> float:
        """Width of `column` and every column after it."""
        return self.width_between(column, "")

    @property
    def width(self) -> float:
        return self.width_between("", "")


class RowDefinition:
    """Working copy of the column definitions for the row being drawn.

    Plugins change a single cell's look here (fill, border, width...) without
    touching the registry, so the change dies with the row.
    """

    def __init__(self, columns: Optional[Dict[str, ColumnDefinition]] = None):
        self._columns: Dict[str, ColumnDefinition] = columns or {}

    @classmethod
    def snapshot(cls, registry: ColumnRegistry) -> "RowDefinition":
        return cls({key: definition.copy() for key, definition in registry.items()})

    def copy(self) -> "RowDefinition":
        return RowDefinition({key: definition.copy() for key, definition in self._columns.items()})

    def get(self, key: str) -> Optional[ColumnDefinition]:
        return self._columns.get(key)

    def set(self, key: str, name: str, value: Any) -> None:
        if key not in self._columns:
            raise MissingColumnError(key)
        self._columns[key].set(name, value)

    def keys(self) -> List[str]:
        return list(self._columns)

    def items(self):
        return self._columns.items()

    def __getitem__(self, key: str) -> ColumnDefinition:
        try:
            return self._columns[key]
        except KeyError:
            raise MissingColumnError(key) from None

    def __contains__(self, key) -> bool:
        return key in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)
