import pytest

from conftest import RecordingCanvas
from flowtable.config import (
    RENDERERS,
    TableConfig,
    build_canvas,
    build_table,
    load_config,
    render_amount,
    resolve_renderers,
)
from flowtable.errors import ConfigurationError
from flowtable.plugins.debug import Debug
from flowtable.plugins.fit_column import FitColumn
from flowtable.plugins.repeat_header import RepeatHeader
from flowtable.plugins.stripe import StripeRows


def test_defaults():
    config = load_config()

    assert config.row_height == 14
    assert config.min_widows_on_page == 0
    assert config.page_size == "A4"
    assert config.margins["left"] == 36


def test_yaml_round_trip(tmp_path):
    config = TableConfig(
        row_height=12,
        min_widows_on_page=3,
        footer_height=20,
        orientation="landscape",
        columns={
            "date": {"header": "Date", "width": 60},
            "amount": {"header": "Amount", "width": 70, "align": "R", "renderer": "amount"},
        },
        stripe_rows=True,
        fit_column="date",
    )
    path = tmp_path / "table.yaml"
    config.to_yaml(path)

    loaded = TableConfig.from_yaml(path)

    assert loaded == config
    assert list(loaded.columns) == ["date", "amount"]


def test_partial_margins_keep_defaults():
    config = TableConfig.from_dict({"margins": {"left": 10}})

    assert config.margins == {"left": 10, "top": 36.0, "right": 36.0, "bottom": 36.0}


def test_unknown_keys_are_rejected():
    with pytest.raises(ConfigurationError, match="colums"):
        TableConfig.from_dict({"colums": {}})


def test_columns_must_be_a_mapping():
    with pytest.raises(ConfigurationError):
        TableConfig.from_dict({"columns": ["a", "b"]})


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("columns: [unclosed\n")

    with pytest.raises(ConfigurationError):
        TableConfig.from_yaml(path)


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n")

    with pytest.raises(ConfigurationError):
        TableConfig.from_yaml(path)


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert TableConfig.from_yaml(path) == TableConfig()


def test_page_layout():
    layout = TableConfig(page_size="letter", orientation="landscape").page_layout()

    assert layout.pagesize == (792, 612)
    assert layout.content_width == 792 - 72


@pytest.mark.parametrize("settings", [
    {"page_size": "A9"},
    {"orientation": "sideways"},
    {"margins": {"left": 10, "gutter": 4}},
])
def test_bad_page_settings(settings):
    config = TableConfig.from_dict(settings)

    with pytest.raises(ConfigurationError):
        config.page_layout()


def test_render_amount():
    assert render_amount(None, 1234.5, {}, "amount", False) == "1,234.50"
    assert render_amount(None, "12", {}, "amount", False) == "12.00"
    assert render_amount(None, "n/a", {}, "amount", False) == "n/a"
    assert render_amount(None, "", {}, "amount", False) == ""


def test_resolve_renderers():
    resolved = resolve_renderers({"renderer": "amount", "header_renderer": "upper", "width": 5})

    assert resolved["renderer"] is RENDERERS["amount"]
    assert resolved["header_renderer"] is RENDERERS["upper"]
    assert resolved["width"] == 5


def test_resolve_renderers_rejects_unknown_names():
    with pytest.raises(ConfigurationError, match="bogus"):
        resolve_renderers({"renderer": "bogus"})


def test_build_table():
    config = TableConfig(
        row_height=12,
        min_widows_on_page=2,
        footer_height=8,
        show_header=False,
        default_column={"border": 1, "height": 12},
        columns={
            "name": {"width": 50},
            "amount": {"width": 40, "renderer": "amount"},
            "notes": {"multi_line": True},
        },
        stripe_rows=False,
        fit_column="notes",
        repeat_header=True,
        debug=True,
    )
    canvas = RecordingCanvas()

    table = build_table(config, canvas)

    assert table.canvas is canvas
    assert table.column_height == 12
    assert table.min_widows_on_page == 2
    assert table.footer_height == 8
    assert table.show_header is False
    assert list(table.get_columns()) == ["name", "amount", "notes"]
    assert table.get_column("name").border == 1
    assert table.get_column("amount").renderer is render_amount
    assert isinstance(table.get_plugin("fit_column"), FitColumn)
    assert isinstance(table.get_plugin("stripe_rows"), StripeRows)
    assert isinstance(table.get_plugin("repeat_header"), RepeatHeader)
    assert isinstance(table.get_plugin("debug"), Debug)

    table.add_body([{"name": "Acme", "amount": 5, "notes": "paid"}])

    assert table.get_column_width("notes") == 190 - 90
    assert "5.00" in canvas.texts()


def test_build_table_without_plugins():
    table = build_table(TableConfig(columns={"a": {}}), RecordingCanvas())

    assert len(table.plugins) == 0


def test_fit_column_must_exist():
    with pytest.raises(ConfigurationError):
        build_table(TableConfig(columns={"a": {}}, fit_column="b"), RecordingCanvas())


def test_build_canvas(tmp_path):
    config = TableConfig(page_size="LETTER", margins={"left": 20, "top": 30, "right": 20, "bottom": 40},
                         style="ledger")

    canvas = build_canvas(config, tmp_path / "out.pdf")

    assert canvas.get_page_width() == 612
    assert canvas.get_break_margin() == 40
    assert canvas.get_y() == 30
    assert canvas.style.font_family == "Courier"


def test_font_overrides_style():
    style = TableConfig(style="report", font_family="Courier", font_size=7).canvas_style()

    assert style.font_family == "Courier"
    assert style.font_size == 7
    assert style.bold_font == "Courier-Bold"
    # the rest still comes from the named style
    assert style.cell_padding == 3.5
