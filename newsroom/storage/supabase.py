from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import structlog

from .base import ListFilesResult, StorageObject, StorageResult, StorageService, UploadResult
from .bucket_config import SUPABASE_PUBLIC_OBJECT_PREFIX, build_public_url

logger = structlog.get_logger(__name__)

CACHE_CONTROL_SECONDS = 31536000


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message)
    return f"Storage API returned {response.status_code}"


class SupabaseStorageService(StorageService):
    """Supabase Storage REST API client authenticated with the service role key."""

    public_url_marker = SUPABASE_PUBLIC_OBJECT_PREFIX

    def __init__(
        self,
        supabase_url: str,
        service_role_key: str,
        page_size: int = 100,
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.supabase_url = supabase_url.rstrip("/")
        self.page_size = page_size
        self.client = http_client or httpx.AsyncClient(
            base_url=f"{self.supabase_url}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_role_key}",
                "apikey": service_role_key,
            },
            timeout=timeout_seconds,
        )

    @staticmethod
    def _object_path(path: str) -> str:
        return quote(path, safe="/")

    async def _list_page(self, bucket: str, prefix: str, offset: int) -> httpx.Response:
        body: Dict[str, Any] = {
            "prefix": prefix,
            "limit": self.page_size,
            "offset": offset,
            "sortBy": {"column": "name", "order": "asc"},
        }
        return await self.client.post(f"/object/list/{bucket}", json=body)

    async def list_files(self, bucket: str, prefix: str = "") -> ListFilesResult:
        result = ListFilesResult()
        offset = 0
        try:
            while True:
                response = await self._list_page(bucket, prefix, offset)
                if response.is_error:
                    message = _error_message(response)
                    logger.error("Failed to list storage objects", bucket=bucket, prefix=prefix, error=message)
                    return ListFilesResult(error=message)

                items = response.json() or []
                for item in items:
                    # Folders come back as placeholder entries without an id
                    if item.get("id") is None:
                        result.folders.append(item["name"])
                    else:
                        result.files.append(StorageObject(
                            name=item["name"],
                            id=item["id"],
                            updated_at=item.get("updated_at"),
                            created_at=item.get("created_at"),
                            metadata=item.get("metadata") or {},
                        ))

                if not items or len(items) < self.page_size:
                    return result
                offset += len(items)
        except httpx.HTTPError as e:
            logger.error("Failed to list storage objects", bucket=bucket, prefix=prefix, error=str(e))
            return ListFilesResult(error=str(e) or e.__class__.__name__)

    async def delete_file(self, bucket: str, path: str) -> StorageResult:
        try:
            response = await self.client.request("DELETE", f"/object/{bucket}", json={"prefixes": [path]})
        except httpx.HTTPError as e:
            logger.error("Failed to delete storage object", bucket=bucket, path=path, error=str(e))
            return StorageResult(error=str(e) or e.__class__.__name__)

        if response.is_error:
            message = _error_message(response)
            logger.error("Failed to delete storage object", bucket=bucket, path=path, error=message)
            return StorageResult(error=message)

        logger.info("Deleted storage object", bucket=bucket, path=path)
        return StorageResult()

    async def upload_file(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = True,
    ) -> UploadResult:
        headers = {
            "Content-Type": content_type,
            "Cache-Control": f"max-age={CACHE_CONTROL_SECONDS}",
            "x-upsert": "true" if upsert else "false",
        }
        try:
            response = await self.client.post(
                f"/object/{bucket}/{self._object_path(path)}", content=data, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("Failed to upload storage object", bucket=bucket, path=path, error=str(e))
            return UploadResult(error=str(e) or e.__class__.__name__)

        if response.is_error:
            message = _error_message(response)
            logger.error("Failed to upload storage object", bucket=bucket, path=path, error=message)
            return UploadResult(error=message)

        logger.info("Uploaded storage object", bucket=bucket, path=path, size=len(data))
        return UploadResult(path=path)

    async def move_file(
        self,
        bucket: str,
        old_path: str,
        new_path: str,
        destination_bucket: Optional[str] = None,
    ) -> StorageResult:
        body = {"bucketId": bucket, "sourceKey": old_path, "destinationKey": new_path}
        if destination_bucket:
            body["destinationBucket"] = destination_bucket
        try:
            response = await self.client.post("/object/move", json=body)
        except httpx.HTTPError as e:
            logger.error("Failed to move storage object", bucket=bucket, path=old_path, error=str(e))
            return StorageResult(error=str(e) or e.__class__.__name__)

        if response.is_error:
            message = _error_message(response)
            logger.error("Failed to move storage object", bucket=bucket, path=old_path, error=message)
            return StorageResult(error=message)
        return StorageResult()

    def get_public_url(self, bucket: str, path: str) -> str:
        return build_public_url(self.supabase_url, bucket, path)

    async def aclose(self) -> None:
        await self.client.aclose()
