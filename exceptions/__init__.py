"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,

    # Backend API
    BackendApiError,
    BackendUnauthorizedError,
    BackendUnavailableError,
    BackendTimeoutError,
    ResponseSchemaError,

    # Session
    AuthenticationError,
    NotAuthenticatedError,
    LoginInProgressError,
    IdentityProviderError,

    # Client-side validation
    StoreNotSelectedError,
    CsvFileRequiredError,
    InvalidCsvFileError,
    ImageUrlsRequiredError,
    InvalidVariantError,
    RouteStatusUnchangedError,

    # Workflows
    InvalidImportStateError,
    SuspendConfirmationRequiredError,
    StoreActionError,
    StoreNotFoundError,
    CsvPreviewRejectedError,
    ProductCreationError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",

    # Backend API
    "BackendApiError",
    "BackendUnauthorizedError",
    "BackendUnavailableError",
    "BackendTimeoutError",
    "ResponseSchemaError",

    # Session
    "AuthenticationError",
    "NotAuthenticatedError",
    "LoginInProgressError",
    "IdentityProviderError",

    # Client-side validation
    "StoreNotSelectedError",
    "CsvFileRequiredError",
    "InvalidCsvFileError",
    "ImageUrlsRequiredError",
    "InvalidVariantError",
    "RouteStatusUnchangedError",

    # Workflows
    "InvalidImportStateError",
    "SuspendConfirmationRequiredError",
    "StoreActionError",
    "StoreNotFoundError",
    "CsvPreviewRejectedError",
    "ProductCreationError",
]
