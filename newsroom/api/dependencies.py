import secrets
from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..config import get_settings
from ..core.database import get_db
from ..repositories.storage_reference_repository import StorageReferenceRepository
from ..services.image_upload import ImageUploadService
from ..services.orphan_cleanup import OrphanCleanupService
from ..storage.base import StorageService

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


def get_storage_reference_repository(db: Session = Depends(get_db)) -> StorageReferenceRepository:
    return StorageReferenceRepository(db)


def get_storage_service(request: Request) -> StorageService:
    storage = getattr(request.app.state, "storage_service", None)
    if storage is None:
        raise HTTPException(status_code=503, detail="Object storage is not configured")
    return storage


def get_orphan_cleanup_service(
    reference_repo: StorageReferenceRepository = Depends(get_storage_reference_repository),
    storage: StorageService = Depends(get_storage_service),
) -> OrphanCleanupService:
    settings = get_settings()
    return OrphanCleanupService(reference_repo, storage, buckets=settings.storage_buckets)


def get_image_upload_service(storage: StorageService = Depends(get_storage_service)) -> ImageUploadService:
    settings = get_settings()
    return ImageUploadService(storage, max_size_bytes=settings.max_upload_size_bytes)


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> None:
    settings = get_settings()

    if not settings.admin_api_token:
        raise HTTPException(status_code=503, detail="Admin access is not configured")

    if not credentials or not credentials.credentials or not secrets.compare_digest(
        credentials.credentials.encode(), settings.admin_api_token.encode()
    ):
        logger.warning("Unauthorized admin request", path=request.url.path)
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
