from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CleanupErrorItem(BaseModel):
    path: str = Field(..., description="Composite bucket:path key, or bucket/ for a listing failure")
    error: str


class OrphanCleanupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deleted: List[str] = Field(default_factory=list, description="Objects deleted, or that would be deleted in a dry run")
    errors: List[CleanupErrorItem] = Field(default_factory=list)
    dry_run: bool = Field(..., alias="dryRun")


class BucketConfigResponse(BaseModel):
    name: str
    max_size_bytes: int
    allowed_mime_types: List[str]


class ImageUploadResponse(BaseModel):
    url: str
    path: str
