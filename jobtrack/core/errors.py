"""
Structured errors for the stage lifecycle API.

Every error a service raises on purpose is an AppError carrying the HTTP
status, a machine-readable code and a caller-safe message. The handler
registered in jobtrack.main renders them as:

    {"error": {"code": "APPLICATION_NOT_FOUND", "message": "Application not found"}}
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ErrorCode:
    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    APPLICATION_STAGE_NOT_FOUND = "APPLICATION_STAGE_NOT_FOUND"
    STAGE_TEMPLATE_NOT_FOUND = "STAGE_TEMPLATE_NOT_FOUND"
    COMPANY_NOT_FOUND = "COMPANY_NOT_FOUND"
    JOB_NOT_FOUND = "JOB_NOT_FOUND"
    RESUME_NOT_FOUND = "RESUME_NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"
    STAGE_NAME_REQUIRED = "STAGE_NAME_REQUIRED"
    CONTENT_REQUIRED = "CONTENT_REQUIRED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = ErrorCode.INTERNAL_ERROR
    message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.message
        self.code = code or self.code
        self.details = details
        super().__init__(self.message)

    @property
    def payload(self) -> Dict[str, Any]:
        return build_error_payload(self.code, self.message, self.details)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class ApplicationNotFound(NotFoundError):
    code = ErrorCode.APPLICATION_NOT_FOUND
    message = "Application not found"


class ApplicationStageNotFound(NotFoundError):
    code = ErrorCode.APPLICATION_STAGE_NOT_FOUND
    message = "Application stage not found"


class StageTemplateNotFound(NotFoundError):
    code = ErrorCode.STAGE_TEMPLATE_NOT_FOUND
    message = "Stage template not found"


class CompanyNotFound(NotFoundError):
    code = ErrorCode.COMPANY_NOT_FOUND
    message = "Company not found"


class JobNotFound(NotFoundError):
    code = ErrorCode.JOB_NOT_FOUND
    message = "Job not found"


class ResumeNotFound(NotFoundError):
    code = ErrorCode.RESUME_NOT_FOUND
    message = "Resume not found"


class InvalidStatus(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.INVALID_STATUS
    message = "Invalid status"


class NameRequired(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.STAGE_NAME_REQUIRED
    message = "Stage name is required"


class ContentRequired(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.CONTENT_REQUIRED
    message = "Comment content is required"


class InternalError(AppError):
    """Unclassified failure. The message stays generic; details go to the log."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ErrorCode.INTERNAL_ERROR
    message = "Internal server error"


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
