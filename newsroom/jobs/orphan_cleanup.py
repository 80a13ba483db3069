"""
Orphaned image cleanup for cron or manual runs.

Usage:
    python -m newsroom.jobs.orphan_cleanup              # dry run
    python -m newsroom.jobs.orphan_cleanup --apply      # delete orphans
    python -m newsroom.jobs.orphan_cleanup --bucket news-images

Prints the result as JSON. Exits with 1 when any error was recorded.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import structlog

from ..config import get_settings
from ..core.database import SessionLocal
from ..core.logging import configure_logging
from ..repositories.storage_reference_repository import StorageReferenceRepository
from ..services.orphan_cleanup import OrphanCleanupResult, OrphanCleanupService
from ..storage import create_storage_service

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find and delete storage objects no longer referenced in the database")
    parser.add_argument("--apply", action="store_true", help="Delete orphaned objects (default is a dry run)")
    parser.add_argument(
        "--bucket",
        action="append",
        dest="buckets",
        metavar="NAME",
        help="Bucket to scan; repeat for several (default: configured buckets)",
    )
    return parser


async def run(dry_run: bool, buckets: Optional[List[str]] = None) -> OrphanCleanupResult:
    settings = get_settings()
    storage = create_storage_service(settings)
    try:
        db = SessionLocal()
        try:
            service = OrphanCleanupService(
                StorageReferenceRepository(db), storage, buckets=settings.storage_buckets
            )
            return await service.find_and_delete_orphaned_images(dry_run=dry_run, buckets=buckets)
        finally:
            db.close()
    finally:
        await storage.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings())

    result = asyncio.run(run(dry_run=not args.apply, buckets=args.buckets))
    print(json.dumps(result.to_dict(), indent=2))
    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
