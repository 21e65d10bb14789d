"""
Copy the whole prize collection from one backend to another.

Useful when moving a local deployment to a serverless host: copy
``file:data/prizes.json`` into ``kv:https://...`` or ``redis:redis://...``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stampbook.errors import StorageUnavailable
from stampbook.storage import FilePrizeStore, KvPrizeStore, PrizeStore, RedisPrizeStore

logger = logging.getLogger(__name__)


def open_store(spec: str, *, key: str, kv_token: str | None) -> PrizeStore:
    """Build a store from ``file:PATH``, ``redis:URL`` or ``kv:URL``."""
    kind, _, location = spec.partition(":")
    if not location:
        raise ValueError(f"Invalid store spec {spec!r}")
    if kind == "file":
        return FilePrizeStore(Path(location))
    if kind == "redis":
        return RedisPrizeStore(url=location, key=key)
    if kind == "kv":
        if not kv_token:
            raise ValueError("--kv-token is required for kv: stores")
        return KvPrizeStore(url=location, token=kv_token, key=key)
    raise ValueError(f"Unknown store kind {kind!r}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Copy prizes between backends")
    parser.add_argument("source", help="file:PATH, redis:URL or kv:URL")
    parser.add_argument("target", help="file:PATH, redis:URL or kv:URL")
    parser.add_argument("--key", default="prizes", help="Key holding the collection")
    parser.add_argument("--kv-token", default=None, help="Bearer token for kv: stores")
    parser.add_argument(
        "--allow-empty",
        action="store_true",
        help="Write even if the source collection is empty",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    try:
        source = open_store(args.source, key=args.key, kv_token=args.kv_token)
        target = open_store(args.target, key=args.key, kv_token=args.kv_token)
    except ValueError as exc:
        parser.error(str(exc))

    prizes = source.load_all()
    if not prizes and not args.allow_empty:
        logger.error(
            "Source %s is empty or unreadable; pass --allow-empty to copy anyway",
            source.describe(),
        )
        return 1

    try:
        target.save_all(prizes)
    except StorageUnavailable as exc:
        logger.error("Copy failed: %s", exc.message)
        return 1

    logger.info(
        "Copied %d prizes from %s to %s", len(prizes), source.describe(), target.describe()
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
