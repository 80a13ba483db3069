from ..config import Settings
from ..core.exceptions import StorageConfigurationError
from .base import ListFilesResult, StorageObject, StorageResult, StorageService, UploadResult
from .bucket_config import BUCKETS, BUCKET_CONFIGS, ReferencedPath, parse_public_url, storage_key


def create_storage_service(settings: Settings) -> StorageService:
    """Build the configured storage backend, failing fast when credentials are absent."""
    if settings.storage_backend == "gcs":
        from google.auth.exceptions import DefaultCredentialsError

        from .gcs import GCSStorageService

        try:
            return GCSStorageService(
                project_id=settings.gcp_project_id,
                service_account_path=settings.gcp_service_account_path,
                page_size=settings.storage_list_page_size,
            )
        except DefaultCredentialsError as e:
            raise StorageConfigurationError("gcs", ["credentials"]) from e

    missing = [
        name for name in ("supabase_url", "supabase_service_role_key")
        if not getattr(settings, name)
    ]
    if missing:
        raise StorageConfigurationError("supabase", missing)

    from .supabase import SupabaseStorageService

    return SupabaseStorageService(
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
        page_size=settings.storage_list_page_size,
        timeout_seconds=settings.storage_request_timeout_seconds,
    )


__all__ = [
    "BUCKETS",
    "BUCKET_CONFIGS",
    "ListFilesResult",
    "ReferencedPath",
    "StorageObject",
    "StorageResult",
    "StorageService",
    "UploadResult",
    "create_storage_service",
    "parse_public_url",
    "storage_key",
]
