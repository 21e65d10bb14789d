"""
Bulk-create prizes from a JSON or CSV file into the configured backend.

JSON input is an array of objects with name/description/requiredStamps and an
optional image. CSV input uses the same column names.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stampbook.config import get_settings
from stampbook.errors import StorageUnavailable, ValidationError
from stampbook.models import PrizeInput
from stampbook.prizes import PrizeCollection, validate_input
from stampbook.storage import build_store

logger = logging.getLogger(__name__)


def read_rows(path: Path) -> list[dict]:
    if path.suffix.lower() == ".csv":
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            return [dict(row) for row in csv.DictReader(f)]
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def _text(row: dict, key: str) -> str | None:
    value = row.get(key)
    if value is None:
        return None
    return str(value).strip() or None


def to_input(row: dict) -> PrizeInput:
    return PrizeInput(
        name=_text(row, "name"),
        description=_text(row, "description"),
        image=_text(row, "image"),
        requiredStamps=row.get("requiredStamps") or row.get("required_stamps"),
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Import prizes from JSON or CSV")
    parser.add_argument("path", type=Path, help="JSON array or CSV file")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Replace the existing collection with the imported prizes",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate rows without writing anything",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    try:
        rows = read_rows(args.path)
    except (OSError, ValueError) as exc:
        logger.error("Could not read %s: %s", args.path, exc)
        return 1

    inputs = []
    for index, row in enumerate(rows, start=1):
        if not isinstance(row, dict):
            logger.warning("Skipping row %d: not an object", index)
            continue
        prize_input = to_input(row)
        try:
            validate_input(prize_input)
        except ValidationError as exc:
            logger.warning("Skipping row %d: %s", index, exc.message)
            continue
        inputs.append(prize_input)

    if args.dry_run:
        logger.info("Dry run: %d of %d rows are valid", len(inputs), len(rows))
        return 0

    if args.replace and not inputs:
        logger.error("No valid rows; refusing to replace the existing prizes")
        return 1

    collection = PrizeCollection(build_store(get_settings()))
    try:
        collection.create_many(inputs, replace=args.replace)
    except StorageUnavailable as exc:
        logger.error("Import aborted: %s", exc.message)
        return 1

    logger.info("Imported %d prizes (%d skipped)", len(inputs), len(rows) - len(inputs))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
