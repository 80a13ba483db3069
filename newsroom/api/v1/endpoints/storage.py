from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ...dependencies import get_image_upload_service, get_orphan_cleanup_service, require_admin
from ..schemas import BucketConfigResponse, ImageUploadResponse, OrphanCleanupResponse
from ....core.exceptions import ImageValidationError, StorageError
from ....services.image_upload import ImageUploadService
from ....services.orphan_cleanup import OrphanCleanupService
from ....storage.bucket_config import BUCKET_CONFIGS

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/orphan-cleanup", response_model=OrphanCleanupResponse)
async def run_orphan_cleanup(
    dry_run: bool = Query(True, description="Only report what would be deleted"),
    cleanup_service: OrphanCleanupService = Depends(get_orphan_cleanup_service),
) -> OrphanCleanupResponse:
    result = await cleanup_service.find_and_delete_orphaned_images(dry_run=dry_run)
    return OrphanCleanupResponse(**result.to_dict())


@router.get("/buckets", response_model=List[BucketConfigResponse])
async def list_buckets() -> List[BucketConfigResponse]:
    return [
        BucketConfigResponse(
            name=config.name,
            max_size_bytes=config.max_size_bytes,
            allowed_mime_types=list(config.allowed_mime_types),
        )
        for config in BUCKET_CONFIGS.values()
    ]


@router.post("/upload", response_model=ImageUploadResponse)
async def upload_image(
    file: UploadFile = File(...),
    bucket: Optional[str] = Query(None),
    upload_service: ImageUploadService = Depends(get_image_upload_service),
) -> ImageUploadResponse:
    data = await file.read()
    try:
        uploaded = await upload_service.upload_image(
            data, filename=file.filename, content_type=file.content_type, bucket=bucket
        )
    except ImageValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except StorageError as e:
        logger.error("Image upload failed", filename=file.filename, details=e.details)
        raise HTTPException(status_code=500, detail=e.message)

    return ImageUploadResponse(url=uploaded.url, path=uploaded.path)
