# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error body carries an "error" key so the front end can render one
# inline message regardless of which endpoint failed.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ClinicalRxQException(Exception):
    """
    Base exception for the ClinicalRxQ API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "CLINICALRXQ_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Program / Content Exceptions
# =============================================================================

class ProgramNotFoundError(ClinicalRxQException):
    """Raised when a program slug doesn't exist."""

    def __init__(self, program_slug: str):
        super().__init__(
            message="Program not found",
            code="PROGRAM_NOT_FOUND",
            status_code=404,
            suggestion="Check the programSlug against GET /api/clinical-programs",
            details={"programSlug": program_slug}
        )


# =============================================================================
# Upstream / Configuration Exceptions
# =============================================================================

class AirtableNotConfiguredError(ClinicalRxQException):
    """Raised when the Airtable PAT or base ID is missing."""

    def __init__(self):
        super().__init__(
            message="Airtable is not configured. Set AIRTABLE_API_KEY and AIRTABLE_BASE_ID.",
            code="AIRTABLE_NOT_CONFIGURED",
            status_code=500,
        )


class SupabaseNotConfiguredError(ClinicalRxQException):
    """Raised when SUPABASE_URL or SUPABASE_ANON_KEY is missing."""

    def __init__(self):
        super().__init__(
            message="Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.",
            code="SUPABASE_NOT_CONFIGURED",
            status_code=500,
        )


class UpstreamServiceError(ClinicalRxQException):
    """Raised when Airtable or Supabase fails; detail is logged, not returned."""

    def __init__(self, service: str):
        super().__init__(
            message="Internal Server Error",
            code="UPSTREAM_ERROR",
            status_code=500,
            details={"service": service},
        )


class StorageUploadError(ClinicalRxQException):
    """Raised when file upload to storage fails."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Check the bucket exists and SUPABASE_SERVICE_KEY is set",
            details={"path": path, "error": error}
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class InvalidCredentialsError(ClinicalRxQException):
    """Raised when the mocked auth store rejects a login."""

    def __init__(self, demo_email: str):
        super().__init__(
            message=f"Invalid credentials. Use {demo_email} and password.",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


class NotAuthenticatedError(ClinicalRxQException):
    """Raised when a member-only endpoint is called without a valid session."""

    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(
            message=reason,
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Sign in via POST /api/v1/auth/login",
        )


# =============================================================================
# Dev Tool Exceptions
# =============================================================================

class DevToolsDisabledError(ClinicalRxQException):
    """Dev-only endpoints are hidden in production."""

    def __init__(self):
        super().__init__(message="Not Found", code="NOT_FOUND", status_code=404)


class InvalidSetupPayloadError(ClinicalRxQException):
    """Raised when the ?c= setup payload can't be decoded."""

    def __init__(self):
        super().__init__(
            message="Missing or invalid setup payload.",
            code="INVALID_SETUP_PAYLOAD",
            status_code=400,
            suggestion='Pass ?c=BASE64(JSON({"baseId": "...", "pat": "..."}))',
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def clinicalrxq_exception_handler(
    request: Request,
    exc: ClinicalRxQException
) -> JSONResponse:
    """
    Convert ClinicalRxQException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (404 route, 405 method) as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
