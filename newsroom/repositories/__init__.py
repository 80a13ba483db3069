from .storage_reference_repository import StorageReferenceRepository

__all__ = ["StorageReferenceRepository"]
