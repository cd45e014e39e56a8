"""Command-line interface: render tables to PDF."""

import argparse
import csv
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
from faker import Faker

from .config import TableConfig, build_canvas, build_table, load_config
from .errors import ConfigurationError, TableError
from .events import Event


logger = logging.getLogger(__name__)

STATUSES = ["Paid", "Open", "Pending", "Void"]


def load_rows(path: Path) -> List[Dict[str, Any]]:
    """Read body rows from a JSON list of objects or a CSV file with a header line."""
    if path.suffix.lower() == ".csv":
        with open(path, newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ConfigurationError(f"{path} must contain a list of objects")
    return data


def bold_header(table) -> None:
    for key in table.row_definition:
        table.set_row_definition(key, "bold", True)
        table.set_row_definition(key, "fill", True)


def demo_config(widows: int) -> TableConfig:
    """Disbursement register layout used by the demo command."""
    return TableConfig(
        row_height=14.0,
        min_widows_on_page=widows,
        footer_height=18.0,
        default_column={"border": 1, "valign": "M"},
        columns={
            "date": {"header": "Date", "width": 62},
            "check": {"header": "Check #", "width": 50, "align": "C"},
            "vendor": {"header": "Vendor", "width": 120, "stretch": 1},
            "description": {"header": "Description", "multi_line": True},
            "amount": {"header": "Amount", "width": 70, "align": "R", "renderer": "amount"},
            "status": {"header": "Status", "width": 48, "align": "C"},
        },
        stripe_rows=False,
        fit_column="description",
        repeat_header=True,
    )


def generate_demo_rows(num_rows: int, rng: np.random.Generator, fake: Faker) -> List[dict]:
    """Generate data rows for a disbursement register."""
    rows = []
    current_date = date(2025, 1, 1)

    for _ in range(num_rows):
        current_date = current_date + timedelta(days=int(rng.integers(0, 4)))
        # Mostly one-liners, sometimes a long memo that wraps
        sentences = int(rng.choice([1, 1, 1, 2, 4]))
        rows.append({
            "date": current_date.isoformat(),
            "check": f"{rng.integers(1000, 9999)}",
            "vendor": fake.company(),
            "description": fake.paragraph(nb_sentences=sentences),
            "amount": float(rng.uniform(50, 25000)),
            "status": str(rng.choice(STATUSES)),
        })

    return rows


def render(config: TableConfig, rows: List[dict], out_path: Path, footer: Optional[str] = None) -> int:
    """Draw `rows` into a new PDF at `out_path`. Returns the page count."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    canvas = build_canvas(config, out_path)
    table = build_table(config, canvas)
    table.on(Event.BEFORE_HEADER, bold_header)

    table.add_body(rows)

    if footer:
        canvas.cell(table.get_width(), config.footer_height or config.row_height, footer,
                    ln=True, border="T", align="R", bold=True)
    canvas.save()
    return canvas.page_count


def cmd_render(args) -> int:
    config = load_config(args.config)
    rows = load_rows(args.data)
    logger.debug("Loaded %d rows from %s", len(rows), args.data)
    pages = render(config, rows, args.out)
    print(f"Rendered {len(rows)} rows on {pages} page(s): {args.out}")
    return 0


def cmd_demo(args) -> int:
    rng = np.random.default_rng(args.seed)
    fake = Faker()
    fake.seed_instance(args.seed)

    config = load_config(args.config) if args.config else demo_config(args.widows)
    rows = generate_demo_rows(args.rows, rng, fake)
    total = sum(row["amount"] for row in rows)
    pages = render(config, rows, args.out, footer=f"Total disbursed: {total:,.2f}")

    print(f"Generated {len(rows)} rows on {pages} page(s)")
    print(f"  Output: {args.out}")
    return 0


def cmd_init_config(args) -> int:
    config = demo_config(widows=3)
    config.to_yaml(args.path)
    print(f"Wrote {args.path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowtable",
        description="Paginated PDF tables with widow control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log page breaks and row decisions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render rows from a JSON or CSV file")
    render_parser.add_argument("--config", type=Path, help="Path to YAML table configuration")
    render_parser.add_argument("--data", type=Path, required=True, help="JSON list of objects or CSV file")
    render_parser.add_argument("--out", type=Path, default=Path("out/table.pdf"), help="Output PDF path")
    render_parser.set_defaults(func=cmd_render)

    demo_parser = subparsers.add_parser("demo", help="Render generated sample data")
    demo_parser.add_argument("--config", type=Path, help="Path to YAML table configuration")
    demo_parser.add_argument("--rows", type=int, default=60, help="Number of rows to generate")
    demo_parser.add_argument("--seed", type=int, default=42, help="Random seed")
    demo_parser.add_argument("--widows", type=int, default=3, help="Minimum rows kept together on the last page")
    demo_parser.add_argument("--out", type=Path, default=Path("out/demo.pdf"), help="Output PDF path")
    demo_parser.set_defaults(func=cmd_demo)

    init_parser = subparsers.add_parser("init-config", help="Write a sample YAML configuration")
    init_parser.add_argument("path", type=Path, help="Where to write the configuration")
    init_parser.set_defaults(func=cmd_init_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except TableError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
