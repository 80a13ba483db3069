from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .bucket_config import ReferencedPath, parse_public_url


@dataclass
class StorageObject:
    name: str
    id: Optional[str] = None
    updated_at: Optional[str] = None
    created_at: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ListFilesResult:
    files: List[StorageObject] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class StorageResult:
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class UploadResult(StorageResult):
    path: str = ""


class StorageService(ABC):
    """
    Async object storage client.

    Remote failures are reported through the ``error`` field of the returned
    result rather than raised, so callers can record them and carry on.
    """

    public_url_marker: str

    @abstractmethod
    async def list_files(self, bucket: str, prefix: str = "") -> ListFilesResult:
        """List the files and immediate sub-folders directly under ``prefix``."""

    @abstractmethod
    async def delete_file(self, bucket: str, path: str) -> StorageResult:
        pass

    @abstractmethod
    async def upload_file(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = True,
    ) -> UploadResult:
        pass

    @abstractmethod
    async def move_file(
        self,
        bucket: str,
        old_path: str,
        new_path: str,
        destination_bucket: Optional[str] = None,
    ) -> StorageResult:
        pass

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        pass

    def parse_public_url(self, url: Optional[str]) -> Optional[ReferencedPath]:
        return parse_public_url(url, marker=self.public_url_marker)

    async def aclose(self) -> None:
        pass
