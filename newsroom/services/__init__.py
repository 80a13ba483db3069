from .image_upload import ImageUploadService, UploadedImage
from .orphan_cleanup import CleanupError, OrphanCleanupResult, OrphanCleanupService

__all__ = ["CleanupError", "ImageUploadService", "OrphanCleanupResult", "OrphanCleanupService", "UploadedImage"]
