from typing import Optional, Dict, Any


class NewsroomError(Exception):
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(NewsroomError):
    pass


class ImageValidationError(ValidationError):
    pass


class StorageError(NewsroomError):
    pass


class StorageConfigurationError(StorageError):
    def __init__(self, backend: str, missing: list):
        super().__init__(
            message=f"Missing {', '.join(missing)} for {backend} storage",
            error_code="STORAGE_NOT_CONFIGURED",
            details={"backend": backend, "missing": missing}
        )
