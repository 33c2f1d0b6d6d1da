from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base for errors raised by the services; rendered as ``{"message": ...}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        super().__init__(status_code=type(self).status_code, detail=message or type(self).message)
        self.extra: Dict[str, Any] = extra


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Please fill all the fields"


class DuplicateEmail(AppError):
    # 400 rather than 409, kept for client compatibility
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class DuplicateRecord(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Medical record already exists for this user"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect email or password"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "User not authenticated"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not allowed to access this medical record"


class RecordNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Medical record not found"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Medical record validation failed"

    def __init__(self, fields: List[str], message: Optional[str] = None):
        super().__init__(message, fields=fields)
        self.fields = fields


class UploadError(AppError):
    message = "Error uploading attachments"

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(message, error=error)


class StorageError(AppError):
    message = "Error saving data"

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(message, error=error)
