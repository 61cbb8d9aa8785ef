"""Seed script for the catalogue's `collection` table.

Pushes the illustrative placeholder entries through the catalog gateway
so a freshly provisioned store has something to browse.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Iterable, List, Mapping

from backend.lilyshelf.config import load_settings
from backend.lilyshelf.domain.catalog import CatalogError, CatalogGateway
from backend.lilyshelf.domain.catalog.samples import PLACEHOLDER_ROWS
from backend.lilyshelf.domain.catalog.store import build_record_store
from backend.lilyshelf.infra.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_seed_payloads(rows: Iterable[Mapping[str, object]]) -> List[dict[str, object]]:
    """Strip store-assigned fields from the placeholder rows."""

    return [
        {key: value for key, value in row.items() if key not in ("id", "createdAt")}
        for row in rows
    ]


def seed(gateway: CatalogGateway, secret: str, *, skip_if_populated: bool = True) -> int:
    if skip_if_populated and gateway.list_entries():
        logger.info("seed_skipped_store_not_empty")
        return 0
    created = 0
    for payload in build_seed_payloads(PLACEHOLDER_ROWS):
        gateway.create_entry(payload, secret=secret)
        created += 1
    logger.info("seed_completed", extra={"created_count": created})
    return created


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--profile", default=None, help="Config profile name.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Insert placeholder rows even when the store already has data.",
    )
    args = parser.parse_args(argv)

    settings = load_settings(profile=args.profile)
    configure_logging(settings.log_level)
    gateway = CatalogGateway(
        build_record_store(settings),
        admin_secret=settings.admin_password,
        default_cover_url=settings.catalog.default_cover_url,
    )
    secret = os.getenv("ADMIN_PASSWORD", settings.admin_password)
    try:
        created = seed(gateway, secret, skip_if_populated=not args.force)
    except CatalogError as exc:
        print(f"Seeding failed: {exc.message}", file=sys.stderr)
        return 1
    print(f"Inserted {created} entries")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
