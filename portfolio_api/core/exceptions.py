from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Базовая ошибка приложения, отдаётся клиенту как JSON"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class LockedError(AppError):
    """Документ защищён паролем, а пароль для разблокировки не передан"""

    status_code = status.HTTP_403_FORBIDDEN
    message = "File is password protected"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, isLocked=True)


class WrongPasswordError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect password"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, isLocked=True)


class NotConfiguredError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server configuration error"


class StoreError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Database error"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
