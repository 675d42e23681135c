"""Custom exceptions for the application."""

from typing import Any, Dict, Optional


class BaseServiceException(Exception):
    """Base exception for all service-related errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseServiceException):
    """Raised when the submitted form or file is rejected."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )


class ExternalServiceError(BaseServiceException):
    """Raised when an external service call fails."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(
            message=f"External service '{service}' error: {message}",
            error_code="EXTERNAL_SERVICE_ERROR",
            details={"service": service, "status_code": status_code},
        )
