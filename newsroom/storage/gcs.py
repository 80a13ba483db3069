import asyncio
import io
import os
from typing import Optional
from urllib.parse import quote

import structlog
from google.cloud import storage
from google.oauth2 import service_account

from .base import ListFilesResult, StorageObject, StorageResult, StorageService, UploadResult
from .bucket_config import GCS_PUBLIC_OBJECT_PREFIX

logger = structlog.get_logger(__name__)


class GCSStorageService(StorageService):
    """
    Google Cloud Storage backend. The client library is blocking, so every
    call runs in a worker thread.
    """

    public_url_marker = GCS_PUBLIC_OBJECT_PREFIX

    def __init__(
        self,
        project_id: Optional[str] = None,
        service_account_path: Optional[str] = None,
        page_size: int = 100,
        client: Optional[storage.Client] = None,
    ):
        self.page_size = page_size
        if client is not None:
            self.client = client
        elif service_account_path and os.path.exists(service_account_path):
            logger.info("Loading GCP credentials from service account file", path=service_account_path)
            credentials = service_account.Credentials.from_service_account_file(service_account_path)
            self.client = storage.Client(credentials=credentials, project=project_id)
        else:
            logger.info("No service account file configured, using ADC")
            self.client = storage.Client(project=project_id)

    def _list(self, bucket: str, prefix: str) -> ListFilesResult:
        blob_prefix = f"{prefix}/" if prefix else ""
        iterator = self.client.list_blobs(
            bucket, prefix=blob_prefix or None, delimiter="/", page_size=self.page_size
        )
        result = ListFilesResult()
        for blob in iterator:
            name = blob.name[len(blob_prefix):]
            # Zero-byte "folder" placeholder objects
            if not name:
                continue
            result.files.append(StorageObject(
                name=name,
                id=str(blob.id) if blob.id else None,
                updated_at=blob.updated.isoformat() if blob.updated else None,
                created_at=blob.time_created.isoformat() if blob.time_created else None,
                metadata={"size": blob.size, "contentType": blob.content_type},
            ))
        # prefixes is only populated once the iterator has been consumed
        for folder_prefix in sorted(iterator.prefixes):
            result.folders.append(folder_prefix[len(blob_prefix):].rstrip("/"))
        return result

    async def list_files(self, bucket: str, prefix: str = "") -> ListFilesResult:
        try:
            return await asyncio.to_thread(self._list, bucket, prefix)
        except Exception as e:
            logger.error("Failed to list GCS objects", bucket=bucket, prefix=prefix, error=str(e))
            return ListFilesResult(error=str(e))

    def _delete(self, bucket: str, path: str) -> None:
        self.client.bucket(bucket).blob(path).delete()

    async def delete_file(self, bucket: str, path: str) -> StorageResult:
        try:
            await asyncio.to_thread(self._delete, bucket, path)
        except Exception as e:
            logger.error("Failed to delete file from GCS", bucket=bucket, blob_name=path, error=str(e))
            return StorageResult(error=str(e))
        logger.info("Deleted file from GCS", bucket=bucket, blob_name=path)
        return StorageResult()

    def _upload(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool) -> None:
        blob = self.client.bucket(bucket).blob(path)
        blob.cache_control = "public, max-age=31536000"
        kwargs = {} if upsert else {"if_generation_match": 0}
        blob.upload_from_file(io.BytesIO(data), content_type=content_type, **kwargs)

    async def upload_file(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = True,
    ) -> UploadResult:
        try:
            await asyncio.to_thread(self._upload, bucket, path, data, content_type, upsert)
        except Exception as e:
            logger.error("Failed to upload file to GCS", bucket=bucket, blob_name=path, error=str(e))
            return UploadResult(error=str(e))
        logger.info("Uploaded file to GCS", bucket=bucket, blob_name=path)
        return UploadResult(path=path)

    def _move(self, bucket: str, old_path: str, new_path: str, destination_bucket: Optional[str]) -> None:
        source_bucket = self.client.bucket(bucket)
        target_bucket = self.client.bucket(destination_bucket) if destination_bucket else source_bucket
        blob = source_bucket.blob(old_path)
        source_bucket.copy_blob(blob, target_bucket, new_path)
        blob.delete()

    async def move_file(
        self,
        bucket: str,
        old_path: str,
        new_path: str,
        destination_bucket: Optional[str] = None,
    ) -> StorageResult:
        try:
            await asyncio.to_thread(self._move, bucket, old_path, new_path, destination_bucket)
        except Exception as e:
            logger.error("Failed to move file in GCS", bucket=bucket, blob_name=old_path, error=str(e))
            return StorageResult(error=str(e))
        return StorageResult()

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{GCS_PUBLIC_OBJECT_PREFIX}{bucket}/{quote(path, safe='/')}"

    async def aclose(self) -> None:
        await asyncio.to_thread(self.client.close)
