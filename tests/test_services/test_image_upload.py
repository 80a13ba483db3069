import re

import pytest
from unittest.mock import AsyncMock

from newsroom.core.exceptions import ImageValidationError, StorageError
from newsroom.services.image_upload import ImageUploadService, build_upload_path, normalize_extension
from newsroom.storage.base import UploadResult

from tests.fakes import FakeStorageService


@pytest.fixture
def upload_service():
    return ImageUploadService(FakeStorageService({"news-images": [], "source-logos": []}))


@pytest.mark.parametrize("filename,expected", [
    ("photo.JPEG", "jpg"),
    ("photo.jpg", "jpg"),
    ("logo.png", "png"),
    ("anim.gif", "gif"),
    ("pic.webp", "webp"),
    ("script.exe", "jpg"),
    ("noext", "jpg"),
    (None, "jpg"),
])
def test_normalize_extension(filename, expected):
    assert normalize_extension(filename) == expected


def test_build_upload_path():
    path = build_upload_path("Photo.PNG")

    assert re.fullmatch(r"uploads/\d{13}-[a-z0-9]{7}\.png", path)


class TestUploadImage:

    @pytest.mark.asyncio
    async def test_uploads_to_requested_bucket(self, upload_service):
        uploaded = await upload_service.upload_image(b"png-bytes", "logo.png", "image/png", bucket="source-logos")

        bucket, path, content_type, size = upload_service.storage.uploads[0]
        assert (bucket, content_type, size) == ("source-logos", "image/png", 9)
        assert uploaded.path == path
        assert uploaded.url.endswith(f"/storage/v1/object/public/source-logos/{path}")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bucket", [None, "avatars"])
    async def test_unknown_bucket_falls_back_to_news_images(self, upload_service, bucket):
        await upload_service.upload_image(b"x", "a.jpg", "image/jpeg", bucket=bucket)

        assert upload_service.storage.uploads[0][0] == "news-images"

    @pytest.mark.asyncio
    async def test_rejects_disallowed_type(self, upload_service):
        with pytest.raises(ImageValidationError) as exc_info:
            await upload_service.upload_image(b"<svg/>", "a.svg", "image/svg+xml")

        assert exc_info.value.error_code == "INVALID_FILE_TYPE"
        assert upload_service.storage.uploads == []

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self):
        service = ImageUploadService(FakeStorageService(), max_size_bytes=4)

        with pytest.raises(ImageValidationError, match="File too large"):
            await service.upload_image(b"12345", "a.jpg", "image/jpeg")

    @pytest.mark.asyncio
    async def test_storage_failure_raises(self, upload_service):
        upload_service.storage.upload_file = AsyncMock(return_value=UploadResult(error="Bucket not found"))

        with pytest.raises(StorageError) as exc_info:
            await upload_service.upload_image(b"x", "a.jpg", "image/jpeg")

        assert exc_info.value.details["error"] == "Bucket not found"
