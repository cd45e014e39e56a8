import json

import numpy as np
import pytest
from faker import Faker

from flowtable.cli import build_parser, demo_config, generate_demo_rows, load_rows, main
from flowtable.config import TableConfig
from flowtable.errors import ConfigurationError


def test_generate_demo_rows_is_reproducible():
    def rows(seed):
        fake = Faker()
        fake.seed_instance(seed)
        return generate_demo_rows(5, np.random.default_rng(seed), fake)

    first, second = rows(7), rows(7)

    assert first == second
    assert len(first) == 5
    assert set(first[0]) == {"date", "check", "vendor", "description", "amount", "status"}
    assert [row["date"] for row in first] == sorted(row["date"] for row in first)


def test_demo_config_columns():
    config = demo_config(widows=4)

    assert config.min_widows_on_page == 4
    assert config.fit_column in config.columns
    assert config.columns["amount"]["renderer"] == "amount"


def test_load_rows_json(tmp_path):
    path = tmp_path / "rows.json"
    path.write_text(json.dumps([{"a": 1}, {"a": 2}]))

    assert load_rows(path) == [{"a": 1}, {"a": 2}]


def test_load_rows_csv(tmp_path):
    path = tmp_path / "rows.csv"
    path.write_text("a,b\n1,x\n2,y\n")

    assert load_rows(path) == [{"a": "1", "b": "x"}, {"a": "2", "b": "y"}]


@pytest.mark.parametrize("content", ['{"a": 1}', "[1, 2]", "not json"])
def test_load_rows_rejects_other_json(tmp_path, content):
    path = tmp_path / "rows.json"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_rows(path)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_demo_command(tmp_path, capsys):
    out = tmp_path / "demo.pdf"

    assert main(["demo", "--rows", "40", "--seed", "1", "--out", str(out)]) == 0

    assert out.read_bytes().startswith(b"%PDF")
    assert "Generated 40 rows" in capsys.readouterr().out


def test_init_config_then_render(tmp_path, capsys):
    config_path = tmp_path / "table.yaml"
    data_path = tmp_path / "rows.json"
    out = tmp_path / "nested" / "table.pdf"
    data_path.write_text(json.dumps([
        {"date": "2025-01-02", "check": "1001", "vendor": "Acme", "description": "Paper", "amount": 12.5, "status": "Paid"},
        {"date": "2025-01-03", "check": "1002", "vendor": "Globex", "description": "Toner", "amount": 99, "status": "Open"},
    ]))

    assert main(["init-config", str(config_path)]) == 0
    assert TableConfig.from_yaml(config_path) == demo_config(widows=3)

    assert main(["render", "--config", str(config_path), "--data", str(data_path), "--out", str(out)]) == 0
    assert out.exists()
    assert "Rendered 2 rows on 1 page(s)" in capsys.readouterr().out


def test_errors_are_reported(tmp_path, capsys):
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("colums: {}\n")
    data_path = tmp_path / "rows.json"
    data_path.write_text("[]")

    code = main(["render", "--config", str(config_path), "--data", str(data_path), "--out", str(tmp_path / "x.pdf")])

    assert code == 1
    assert "Unknown config keys" in capsys.readouterr().err
