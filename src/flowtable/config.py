"""Configuration dataclasses and YAML loading for tables."""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .canvas import ReportLabCanvas
from .errors import ConfigurationError
from .layout import Margins, PageLayout
from .plugins.debug import Debug
from .plugins.fit_column import FitColumn
from .plugins.repeat_header import RepeatHeader
from .plugins.stripe import StripeRows
from .styles import CanvasStyle, get_style
from .table import Table


def render_amount(table, value, row, column, is_height_pass):
    """Thousands separators and two decimals; non-numbers are left alone."""
    if value in ("", None):
        return ""
    try:
        return f"{float(value):,.2f}"
    except (TypeError, ValueError):
        return value


def render_upper(table, value, row, column, is_height_pass):
    return str(value).upper()


# Renderers a YAML file can refer to by name
RENDERERS = {
    "amount": render_amount,
    "upper": render_upper,
}


def resolve_renderers(definition: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(definition, dict):
        raise ConfigurationError(f"Column definition must be a mapping, got {definition!r}")
    resolved = dict(definition)
    for name in ("renderer", "header_renderer"):
        value = resolved.get(name)
        if isinstance(value, str):
            if value not in RENDERERS:
                raise ConfigurationError(
                    f"Unknown {name} {value!r}, expected one of {', '.join(RENDERERS)}"
                )
            resolved[name] = RENDERERS[value]
    return resolved


@dataclass
class TableConfig:
    """Everything needed to build a table and the canvas it draws on."""

    row_height: float = 14.0
    min_widows_on_page: int = 0
    footer_height: float = 0.0
    show_header: bool = True

    # Page
    page_size: str = "A4"
    orientation: str = "portrait"
    margins: Dict[str, float] = field(default_factory=lambda: {
        "left": 36.0,
        "top": 36.0,
        "right": 36.0,
        "bottom": 36.0,
    })
    break_margin: Optional[float] = None  # Defaults to the bottom margin
    style: str = "plain"
    font_family: Optional[str] = None  # Overrides the style font
    font_size: Optional[float] = None

    # Columns, in drawing order
    default_column: Dict[str, Any] = field(default_factory=lambda: {
        "border": 1,
    })
    columns: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # Plugins
    stripe_rows: Optional[bool] = None  # None = no striping, else start fill
    fit_column: Optional[str] = None
    repeat_header: bool = False
    debug: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TableConfig":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        if "columns" in data and not isinstance(data["columns"], dict):
            raise ConfigurationError("'columns' must map column keys to definitions")
        if "margins" in data:
            margins = cls().margins
            margins.update(data["margins"] or {})
            data["margins"] = margins
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path) -> "TableConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping at top level")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_height": self.row_height,
            "min_widows_on_page": self.min_widows_on_page,
            "footer_height": self.footer_height,
            "show_header": self.show_header,
            "page_size": self.page_size,
            "orientation": self.orientation,
            "margins": dict(self.margins),
            "break_margin": self.break_margin,
            "style": self.style,
            "font_family": self.font_family,
            "font_size": self.font_size,
            "default_column": dict(self.default_column),
            "columns": {key: dict(definition) for key, definition in self.columns.items()},
            "stripe_rows": self.stripe_rows,
            "fit_column": self.fit_column,
            "repeat_header": self.repeat_header,
            "debug": self.debug,
        }

    def to_yaml(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def canvas_style(self) -> CanvasStyle:
        style = get_style(self.style)
        if self.font_family:
            style = replace(style, font_family=self.font_family)
        if self.font_size:
            style = replace(style, font_size=float(self.font_size))
        return style

    def page_layout(self) -> PageLayout:
        try:
            return PageLayout.from_name(self.page_size, self.orientation, Margins(**self.margins))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid page settings: {e}") from e


def load_config(path: Optional[Path] = None) -> TableConfig:
    """Load config from path or return default config."""
    if path is None:
        return TableConfig()
    return TableConfig.from_yaml(path)


def build_canvas(config: TableConfig, target: Any) -> ReportLabCanvas:
    """A ReportLab canvas with the page geometry and style of `config`."""
    return ReportLabCanvas(
        target,
        layout=config.page_layout(),
        style=config.canvas_style(),
        break_margin=config.break_margin,
    )


def build_table(config: TableConfig, canvas) -> Table:
    """Create a table on `canvas` with the columns and plugins of `config`."""
    table = Table(
        canvas,
        config.row_height,
        min_widows_on_page=config.min_widows_on_page,
        footer_height=config.footer_height,
        show_header=config.show_header,
    )
    table.set_default_column_definition(resolve_renderers(config.default_column or {}))
    for key, definition in config.columns.items():
        table.add_column(key, resolve_renderers(definition or {}))

    if config.fit_column is not None:
        if config.fit_column not in table.columns:
            raise ConfigurationError(f"fit_column {config.fit_column!r} is not a configured column")
        table.add_plugin(FitColumn(config.fit_column), "fit_column")
    if config.stripe_rows is not None:
        table.add_plugin(StripeRows(bool(config.stripe_rows)), "stripe_rows")
    if config.repeat_header:
        table.add_plugin(RepeatHeader(), "repeat_header")
    if config.debug:
        table.add_plugin(Debug(), "debug")
    return table
