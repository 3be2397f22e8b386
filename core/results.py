# core/results.py
"""
Uniform outcome of every service-layer operation.

Services never raise for expected business failures ("already registered",
"not the team leader", ...). They return a ServiceResult and the API layer
maps ``error_code`` to an HTTP status.
"""
from dataclasses import dataclass
from typing import Any, Optional

from rest_framework import status


class ErrorCode:
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    DUPLICATE_NAME = "duplicate_name"


HTTP_STATUS_BY_CODE = {
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_NAME: status.HTTP_409_CONFLICT,
}


@dataclass
class ServiceResult:
    success: bool
    message: str = ""
    data: Any = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> "ServiceResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error_code: str, message: str) -> "ServiceResult":
        return cls(success=False, message=message, error_code=error_code)

    @property
    def http_status(self) -> int:
        if self.success:
            return status.HTTP_200_OK
        return HTTP_STATUS_BY_CODE.get(self.error_code, status.HTTP_400_BAD_REQUEST)

    def __bool__(self):
        return self.success
