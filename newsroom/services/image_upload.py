import os
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

import structlog

from ..core.exceptions import ImageValidationError, StorageError
from ..storage.base import StorageService
from ..storage.bucket_config import BUCKETS, MAX_FILE_SIZE_BYTES, is_allowed_bucket, is_allowed_mime_type

logger = structlog.get_logger(__name__)

UPLOAD_PREFIX = "uploads"
SAFE_EXTENSIONS = {"jpg", "png", "webp", "gif"}
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class UploadedImage:
    url: str
    path: str


def normalize_extension(filename: Optional[str]) -> str:
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    if ext == "jpeg":
        return "jpg"
    return ext if ext in SAFE_EXTENSIONS else "jpg"


def build_upload_path(filename: Optional[str]) -> str:
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(7))
    return f"{UPLOAD_PREFIX}/{millis}-{suffix}.{normalize_extension(filename)}"


class ImageUploadService:

    def __init__(self, storage: StorageService, max_size_bytes: int = MAX_FILE_SIZE_BYTES):
        self.storage = storage
        self.max_size_bytes = max_size_bytes

    def validate(self, content_type: Optional[str], size: int) -> None:
        if not is_allowed_mime_type(content_type):
            raise ImageValidationError(
                "Invalid file type. Use JPEG, PNG, WebP or GIF.",
                error_code="INVALID_FILE_TYPE",
                details={"content_type": content_type},
            )
        if size > self.max_size_bytes:
            raise ImageValidationError(
                f"File too large. Max {self.max_size_bytes // (1024 * 1024)}MB.",
                error_code="FILE_TOO_LARGE",
                details={"size": size, "max_size": self.max_size_bytes},
            )

    async def upload_image(
        self,
        data: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        bucket: Optional[str] = None,
    ) -> UploadedImage:
        self.validate(content_type, len(data))

        target_bucket = bucket if is_allowed_bucket(bucket) else BUCKETS.NEWS_IMAGES
        path = build_upload_path(filename)

        result = await self.storage.upload_file(target_bucket, path, data, content_type=content_type)
        if result.error or not result.path:
            raise StorageError(
                "Upload failed",
                error_code="UPLOAD_FAILED",
                details={"bucket": target_bucket, "error": result.error},
            )

        return UploadedImage(url=self.storage.get_public_url(target_bucket, result.path), path=result.path)
