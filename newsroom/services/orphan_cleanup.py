"""
Orphaned image cleanup.

Finds storage objects that no database record points at any more
(article thumbnails, article gallery images, source logos) and deletes
them, or only reports them when run as a dry run.

The run is not coordinated with writers: an image uploaded and attached to
a record between the bucket listing and the delete can still be removed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

import structlog

from ..core.exceptions import StorageError
from ..repositories.storage_reference_repository import StorageReferenceRepository
from ..storage.base import StorageService
from ..storage.bucket_config import BUCKET_IDS, storage_key

logger = structlog.get_logger(__name__)


@dataclass
class CleanupError:
    path: str
    error: str


@dataclass
class OrphanCleanupResult:
    # In a dry run ``deleted`` holds the objects that would be deleted
    deleted: List[str] = field(default_factory=list)
    errors: List[CleanupError] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deleted": list(self.deleted),
            "errors": [{"path": e.path, "error": e.error} for e in self.errors],
            "dryRun": self.dry_run,
        }


class OrphanCleanupService:

    def __init__(
        self,
        reference_repo: StorageReferenceRepository,
        storage: StorageService,
        buckets: Optional[Iterable[str]] = None,
    ):
        self.reference_repo = reference_repo
        self.storage = storage
        self.buckets = list(buckets) if buckets is not None else list(BUCKET_IDS)

    def list_referenced_storage_paths(self) -> Set[str]:
        """Composite keys of every object referenced from the database."""
        urls = [
            *self.reference_repo.list_thumbnail_urls(),
            *self.reference_repo.list_article_image_urls(),
            *self.reference_repo.list_source_logo_urls(),
        ]

        referenced = set()
        for url in urls:
            ref = self.storage.parse_public_url(url)
            if ref:
                referenced.add(ref.key)
        return referenced

    async def list_all_paths_in_bucket(self, bucket: str) -> List[str]:
        """
        Every object path in ``bucket``, walking sub-folders to any depth.

        Raises StorageError if any folder in the bucket cannot be listed.
        """
        paths: List[str] = []
        pending = [""]

        while pending:
            prefix = pending.pop()
            listing = await self.storage.list_files(bucket, prefix)
            if listing.error:
                raise StorageError(listing.error, details={"bucket": bucket, "prefix": prefix})

            for f in listing.files:
                paths.append(f"{prefix}/{f.name}" if prefix else f.name)
            # Reversed so folders are walked in listing order
            for folder in reversed(listing.folders):
                pending.append(f"{prefix}/{folder}" if prefix else folder)

        return paths

    async def find_and_delete_orphaned_images(
        self,
        dry_run: bool = False,
        buckets: Optional[Iterable[str]] = None,
    ) -> OrphanCleanupResult:
        buckets = list(buckets) if buckets is not None else self.buckets
        referenced = self.list_referenced_storage_paths()
        result = OrphanCleanupResult(dry_run=dry_run)
        scanned = 0

        logger.info(
            "Starting orphaned image cleanup",
            dry_run=dry_run,
            buckets=buckets,
            referenced_count=len(referenced),
        )

        for bucket in buckets:
            try:
                paths = await self.list_all_paths_in_bucket(bucket)
            except Exception as e:
                logger.warning("Failed to list bucket", bucket=bucket, error=str(e))
                result.errors.append(CleanupError(path=f"{bucket}/", error=str(e)))
                continue

            scanned += len(paths)
            for path in paths:
                key = storage_key(bucket, path)
                if key in referenced:
                    continue

                if dry_run:
                    result.deleted.append(key)
                    continue

                try:
                    outcome = await self.storage.delete_file(bucket, path)
                    error = outcome.error
                except Exception as e:
                    error = str(e)

                if error:
                    logger.warning("Failed to delete orphaned image", key=key, error=error)
                    result.errors.append(CleanupError(path=key, error=error))
                else:
                    result.deleted.append(key)

        logger.info(
            "Finished orphaned image cleanup",
            dry_run=dry_run,
            scanned_count=scanned,
            deleted_count=len(result.deleted),
            error_count=len(result.errors),
        )
        return result
