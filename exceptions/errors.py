"""
Custom exception classes for the application.

Every error raised by the console derives from AppError so routes can
render a uniform error body.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "STORE_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Request conflicts with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# BACKEND API ERRORS
# ===================

class BackendApiError(AppError):
    """
    Backend returned an error or could not be reached.

    Attributes:
        backend_status: HTTP status from the backend (None if no response)
        backend_message: "message" field of the error body, if any
        payload: Parsed error body
        path: Request path that failed
    """

    def __init__(
        self,
        path: str,
        backend_status: Optional[int],
        backend_message: Optional[str] = None,
        payload: Any = None,
        code: str = "BACKEND_ERROR",
        status_code: Optional[int] = None
    ):
        self.path = path
        self.backend_status = backend_status
        self.backend_message = backend_message
        self.payload = payload
        super().__init__(
            code=code,
            message=backend_message or f"Backend request failed ({backend_status})",
            status_code=status_code or backend_status or 502,
            details={"path": path, "backend_status": backend_status}
        )

    @property
    def retryable(self) -> bool:
        """Server-side failures are worth another attempt; client errors are not."""
        return self.backend_status is None or self.backend_status >= 500

    def display_message(self, fallback: str) -> str:
        """Backend message when present, else the caller's generic fallback."""
        return self.backend_message or fallback


class BackendUnauthorizedError(BackendApiError):
    """Backend rejected the credential (401)."""

    def __init__(self, path: str, backend_message: Optional[str] = None, payload: Any = None):
        super().__init__(
            path=path,
            backend_status=401,
            backend_message=backend_message,
            payload=payload,
            code="BACKEND_UNAUTHORIZED",
            status_code=401
        )


class BackendUnavailableError(BackendApiError):
    """No response from the backend (network failure)."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            path=path,
            backend_status=None,
            code="BACKEND_UNAVAILABLE",
            status_code=503
        )
        self.message = f"Could not reach backend: {reason}"
        self.args = (self.message,)


class BackendTimeoutError(BackendUnavailableError):
    """Backend did not answer within the client-side timeout."""

    def __init__(self, path: str, timeout: float):
        super().__init__(path=path, reason=f"timed out after {timeout:g}s")
        self.code = "BACKEND_TIMEOUT"
        self.status_code = 504
        self.details["timeout_seconds"] = timeout


class ResponseSchemaError(BackendApiError):
    """Backend payload did not match the expected shape."""

    def __init__(self, path: str, schema: str, errors: list[dict]):
        super().__init__(
            path=path,
            backend_status=200,
            code="BACKEND_SCHEMA_MISMATCH",
            status_code=502
        )
        self.message = f"Unexpected {schema} payload from backend"
        self.args = (self.message,)
        self.details.update({"schema": schema, "errors": errors})

    @property
    def retryable(self) -> bool:
        return False


# ===================
# SESSION ERRORS
# ===================

class AuthenticationError(AppError):
    """Login was refused or its response was unusable (401)."""

    def __init__(self, message: str = "Login failed", details: Optional[dict] = None):
        super().__init__(
            code="AUTHENTICATION_FAILED",
            message=message,
            status_code=401,
            details=details
        )


class NotAuthenticatedError(AppError):
    """Screen requires a signed-in admin (401)."""

    def __init__(self):
        super().__init__(
            code="NOT_AUTHENTICATED",
            message="Sign in to continue",
            status_code=401,
            details={"redirect": "/login"}
        )


class LoginInProgressError(ConflictError):
    """A login attempt is already running."""

    def __init__(self):
        super().__init__(
            code="LOGIN_IN_PROGRESS",
            message="A login attempt is already in progress"
        )


class IdentityProviderError(ExternalServiceError):
    """Identity provider call failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="identity_provider",
            message=message,
            details=details
        )


# ===================
# CLIENT-SIDE VALIDATION
# ===================

class StoreNotSelectedError(ValidationError):
    """Operation requires a target store."""

    def __init__(self, message: str = "Please select a store before uploading"):
        super().__init__(
            code="STORE_NOT_SELECTED",
            message=message
        )


class CsvFileRequiredError(ValidationError):
    """No CSV file chosen."""

    def __init__(self, message: str = "Please select a CSV file"):
        super().__init__(
            code="CSV_FILE_REQUIRED",
            message=message
        )


class InvalidCsvFileError(ValidationError):
    """Chosen file is not a CSV."""

    def __init__(self, filename: str, content_type: Optional[str]):
        super().__init__(
            code="INVALID_CSV_FILE",
            message="Please select a valid CSV file",
            details={"filename": filename, "content_type": content_type}
        )


class ImageUrlsRequiredError(ValidationError):
    """Manual product form has no usable image URL."""

    def __init__(self):
        super().__init__(
            code="IMAGE_URLS_REQUIRED",
            message="Please provide at least one image URL"
        )


class InvalidVariantError(ValidationError):
    """One or more variants have an invalid price or inventory."""

    def __init__(self, invalid_rows: list[int]):
        super().__init__(
            code="INVALID_VARIANTS",
            message="All variants must have valid price and inventory",
            details={"invalid_variants": invalid_rows}
        )


class RouteStatusUnchangedError(ValidationError):
    """Requested route product status equals the current one."""

    def __init__(self, status: str):
        super().__init__(
            code="ROUTE_STATUS_UNCHANGED",
            message=f"Route product status is already {status}",
            details={"status": status}
        )


# ===================
# WORKFLOW ERRORS
# ===================

class InvalidImportStateError(ConflictError):
    """CSV import step not allowed from the current screen state."""

    def __init__(self, action: str, state: str):
        super().__init__(
            code="INVALID_IMPORT_STATE",
            message=f"Cannot {action} while import is {state}",
            details={"action": action, "state": state}
        )


class SuspendConfirmationRequiredError(ConflictError):
    """Suspension must be confirmed before it is sent."""

    def __init__(self, store_id: str):
        super().__init__(
            code="SUSPEND_CONFIRMATION_REQUIRED",
            message="Confirm the suspension before it is applied",
            details={"store_id": store_id}
        )


class StoreActionError(AppError):
    """Backend answered a store mutation with success=false (400)."""

    def __init__(self, action: str, message: str, store_id: Optional[str] = None):
        super().__init__(
            code="STORE_ACTION_FAILED",
            message=message,
            status_code=400,
            details={"action": action, "store_id": store_id}
        )


class StoreNotFoundError(NotFoundError):
    """Store not found."""

    def __init__(self, store_id: str):
        super().__init__(
            resource="Store",
            identifier=store_id,
            code="STORE_NOT_FOUND"
        )


class CsvPreviewRejectedError(AppError):
    """Backend answered the CSV preview with success=false (400)."""

    def __init__(self, message: str, store_id: Optional[str] = None):
        super().__init__(
            code="CSV_PREVIEW_REJECTED",
            message=message,
            status_code=400,
            details={"store_id": store_id}
        )


class ProductCreationError(AppError):
    """Backend answered the manual product submission with success=false (400)."""

    def __init__(self, message: str, store_id: Optional[str] = None):
        super().__init__(
            code="PRODUCT_CREATION_FAILED",
            message=message,
            status_code=400,
            details={"store_id": store_id}
        )
