"""Convert a BISAC subject code CSV export into the JSON served by /bisac-codes."""

from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

DEFAULT_OUTPUT = ROOT / "app" / "data" / "bisac_codes.json"


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Build bisac_codes.json from a Code,Description[,Comment] CSV file.",
    )
    parser.add_argument(
        "source",
        type=Path,
        help="CSV export with a header row (Code, Description, Comment).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Where to write the JSON file (default: {DEFAULT_OUTPUT}).",
    )
    return parser.parse_args()


def read_entries(source: Path) -> list[dict[str, str]]:
    """Read ``{code, description}`` pairs, skipping the header row."""
    entries: list[dict[str, str]] = []
    with source.open(newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        next(reader, None)
        for row in reader:
            if len(row) < 2:
                continue
            entries.append({"code": row[0], "description": row[1]})
    return entries


def main() -> None:
    """CLI entry point."""
    args = parse_args()

    from app.services.bisac_service import build_catalog

    catalog = build_catalog(read_entries(args.source))
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(
        json.dumps({"codes": catalog.codes, "categories": catalog.categories}, indent=2),
        encoding="utf-8",
    )
    print(
        f"Processed {len(catalog.codes)} BISAC codes "
        f"into {len(catalog.categories)} categories"
    )


if __name__ == "__main__":
    main()
