"""Custom exception classes and error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": code,
                    "message": message,
                    "details": details or {},
                },
            },
        )


class SchoolSuspendedError(AppException):
    """School is suspended and mutations are blocked."""

    def __init__(self, school_id: int | None = None):
        details = {}
        if school_id is not None:
            details["school_id"] = school_id
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code="SCHOOL_SUSPENDED",
            message="School is suspended. All mutations are blocked.",
            details=details,
        )


class ValidationError(AppException):
    """Data validation failed."""

    def __init__(
        self,
        message: str = "Validation error",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        details = {}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            message=f"{resource} not found",
            details=details,
        )


class PublishFailedError(AppException):
    """Report batch could not be persisted; nothing from the run was published."""

    def __init__(
        self,
        message: str = "Report publication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="PUBLISH_FAILED",
            message=message,
            details=details,
        )


class PublishCancelledError(AppException):
    """Publication run was cancelled before persistence."""

    def __init__(self, config_id: int, processed: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code="PUBLISH_CANCELLED",
            message="Report publication was cancelled. No reports were written.",
            details={"config_id": config_id, "students_processed": processed},
        )


class NotificationError(Exception):
    """Outbound notification could not be delivered."""

    def __init__(self, recipient: str, reason: str):
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Notification to {recipient} failed: {reason}")

