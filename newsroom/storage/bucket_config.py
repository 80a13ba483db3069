"""
Bucket names, upload limits and public URL helpers for object storage.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import quote, unquote


class BUCKETS:
    NEWS_IMAGES = "news-images"
    SOURCE_LOGOS = "source-logos"


BUCKET_IDS: Tuple[str, ...] = (BUCKETS.NEWS_IMAGES, BUCKETS.SOURCE_LOGOS)

ALLOWED_MIME_TYPES: Tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
)

MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5MB

SUPABASE_PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public/"
GCS_PUBLIC_OBJECT_PREFIX = "https://storage.googleapis.com/"


@dataclass(frozen=True)
class BucketConfig:
    name: str
    max_size_bytes: int
    allowed_mime_types: Tuple[str, ...]


BUCKET_CONFIGS: Dict[str, BucketConfig] = {
    name: BucketConfig(name=name, max_size_bytes=MAX_FILE_SIZE_BYTES, allowed_mime_types=ALLOWED_MIME_TYPES)
    for name in BUCKET_IDS
}


def storage_key(bucket: str, path: str) -> str:
    """Composite ``bucket:path`` key used to identify an object across buckets."""
    return f"{bucket}:{path}"


@dataclass(frozen=True)
class ReferencedPath:
    bucket: str
    path: str

    @property
    def key(self) -> str:
        return storage_key(self.bucket, self.path)


def parse_public_url(url: Optional[str], marker: str = SUPABASE_PUBLIC_OBJECT_PREFIX) -> Optional[ReferencedPath]:
    """
    Split a public object URL into bucket and object path.

    Returns None for anything that is not one of our public object URLs:
    empty values, external hosts, and URLs with no object path after the bucket.
    """
    if not url or not isinstance(url, str) or marker not in url:
        return None

    after = url[url.index(marker) + len(marker):]
    # Query strings and fragments are not part of the object name
    for separator in ("?", "#"):
        after = after.split(separator, 1)[0]

    bucket, slash, raw_path = after.partition("/")
    if not slash or not bucket:
        return None

    path = unquote(raw_path)
    return ReferencedPath(bucket=bucket, path=path) if path else None


def build_public_url(base_url: str, bucket: str, path: str) -> str:
    base = base_url.rstrip("/")
    encoded_path = "/".join(quote(segment, safe="") for segment in path.split("/"))
    return f"{base}{SUPABASE_PUBLIC_OBJECT_PREFIX}{bucket}/{encoded_path}"


def is_allowed_bucket(bucket: Optional[str]) -> bool:
    return bucket in BUCKET_IDS


def is_allowed_mime_type(content_type: Optional[str]) -> bool:
    return content_type in ALLOWED_MIME_TYPES
