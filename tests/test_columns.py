import pytest

from flowtable.columns import ColumnDefinition, ColumnRegistry, RowDefinition
from flowtable.errors import ConfigurationError, MissingColumnError
from flowtable.events import Event, EventBus


@pytest.fixture
def registry():
    registry = ColumnRegistry(default_height=10)
    for key, width in (("A", 10), ("B", 20), ("C", 30), ("D", 40), ("E", 50)):
        registry.add(key, {"width": width})
    return registry


def test_merge_layers_later_wins():
    definition = ColumnDefinition.merge(
        {"width": 20, "align": "C", "border": 1},
        {"width": 35},
        default_height=12,
    )

    assert definition.width == 35
    assert definition.align == "C"
    assert definition.border == 1
    assert definition.height == 12


def test_merge_keeps_unknown_keys_as_options():
    definition = ColumnDefinition.merge({"font_name": "Courier", "options": {"bold": True}})

    assert definition.options == {"font_name": "Courier", "bold": True}
    assert definition.get("font_name") == "Courier"
    assert definition.get("missing", "x") == "x"


@pytest.mark.parametrize("layer", [
    {"width": "wide"},
    {"width": -1},
    {"height": True},
    {"align": "X"},
    {"renderer": "not callable"},
    {"options": ["bold"]},
])
def test_merge_rejects_malformed_values(layer):
    with pytest.raises(ConfigurationError):
        ColumnDefinition.merge(layer)


def test_merge_rejects_non_mapping_layer():
    with pytest.raises(ConfigurationError):
        ColumnDefinition.merge(["width", 10])


def test_defaults_apply_to_columns_added_afterwards():
    registry = ColumnRegistry(default_height=10)
    registry.add("first")
    registry.set_defaults({"width": 25, "border": 1})
    registry.add("second")
    registry.add("third", {"width": 5})

    assert registry.get("first").width == 10
    assert registry.get("first").border == 0
    assert registry.get("second").width == 25
    assert registry.get("third").width == 5
    assert registry.get("third").border == 1


def test_set_defaults_rejects_non_mapping():
    with pytest.raises(ConfigurationError):
        ColumnRegistry().set_defaults("wide")


def test_add_fires_column_added():
    bus = EventBus("table")
    seen = []
    bus.on(Event.COLUMN_ADDED, lambda table, key, definition: seen.append((table, key, definition.width)))
    registry = ColumnRegistry(bus)

    registry.add("amount", {"width": 30})

    assert seen == [("table", "amount", 30)]


def test_re_adding_a_key_replaces_it_in_place(registry):
    registry.add("B", {"width": 99})

    assert registry.keys() == ["A", "B", "C", "D", "E"]
    assert registry.get("B").width == 99


def test_missing_column(registry):
    with pytest.raises(MissingColumnError) as excinfo:
        registry.get("Z")
    assert excinfo.value.key == "Z"
    assert str(excinfo.value) == "Column 'Z' doesn't exist"

    with pytest.raises(KeyError):
        registry.set("Z", "width", 1)


def test_set_updates_field_or_option(registry):
    registry.set("A", "width", 15)
    registry.set("A", "font_size", 7)

    assert registry.get("A").width == 15
    assert registry.get("A").options["font_size"] == 7


def test_set_rejects_whole_options_replacement(registry):
    with pytest.raises(ConfigurationError):
        registry.set("A", "options", {})


def test_total_width(registry):
    assert registry.width == 150


def test_width_between(registry):
    assert registry.width_between("B", "D") == 90
    assert registry.width_between("C", "C") == 30


def test_width_until_excludes_the_column(registry):
    assert registry.width_until("C") == 30
    assert registry.width_until("A") == 0


def test_width_from_includes_the_column(registry):
    assert registry.width_from("C") == 120
    assert registry.width_from("E") == 50


def test_width_with_unknown_keys(registry):
    assert registry.width_between("Z", "B") == 0
    assert registry.width_between("D", "Z") == 90
    assert registry.width_until("Z") == 150


def test_last_key(registry):
    assert registry.last_key() == "E"
    assert ColumnRegistry().last_key() is None


def test_row_definition_is_isolated_from_registry(registry):
    row = RowDefinition.snapshot(registry)
    row.set("A", "fill", True)
    row.set("A", "font_name", "Courier")

    assert row["A"].fill is True
    assert registry.get("A").fill is False
    assert "font_name" not in registry.get("A").options


def test_row_definition_missing_key(registry):
    row = RowDefinition.snapshot(registry)

    assert row.get("Z") is None
    with pytest.raises(MissingColumnError):
        row.set("Z", "fill", True)
    with pytest.raises(MissingColumnError):
        row["Z"]


def test_row_definition_copy_is_deep_per_column(registry):
    row = RowDefinition.snapshot(registry)
    clone = row.copy()
    clone.set("B", "width", 1)

    assert row["B"].width == 20
    assert list(clone) == ["A", "B", "C", "D", "E"]


@pytest.mark.parametrize("key, successor", [("A", "B"), ("B", "C"), ("D", "E")])
def test_width_partition(registry, key, successor):
    assert registry.width_until(key) + registry.width_from(key) == registry.width
    assert (
        registry.width_until(key) + registry.get(key).width + registry.width_from(successor)
        == registry.width
    )


def test_set_validates_and_keeps_previous_value(registry):
    with pytest.raises(ConfigurationError):
        registry.set("A", "width", "wide")
    assert registry.get("A").width == 10

    row = RowDefinition.snapshot(registry)
    with pytest.raises(ConfigurationError):
        row.set("B", "align", "X")
    assert row["B"].align == "L"
