"""
Standardized error handling utilities for the identity service.

This module provides the exception taxonomy shared by the storage layer, the
identity service and the HTTP routes, plus consistent JSON response helpers.
A missing key is never an exception here; absence is reported as ``None``.
"""

from typing import Optional, Tuple, Dict, Any

from utils.audit_logger import audit_logger, AuditEventType


# Custom exception classes for domain-specific errors
class IdentityServiceError(Exception):
    """Base exception for all identity service errors."""

    def __init__(self, message: str, error_code: str = 'INTERNAL_ERROR', status_code: int = 500):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(IdentityServiceError):
    """Exception raised for input validation failures."""

    def __init__(self, message: str, error_code: str = 'VALIDATION_ERROR'):
        super().__init__(message, error_code, 400)


class AuthenticationError(IdentityServiceError):
    """Exception raised when a signature, public key or signature check is bad."""

    def __init__(self, message: str = 'Auth Error', error_code: str = 'AUTH_ERROR'):
        super().__init__(message, error_code, 403)


class AuthorizationError(IdentityServiceError):
    """Exception raised when a verified caller may not touch a user."""

    def __init__(self, message: str, error_code: str = 'AUTHORIZATION_ERROR'):
        super().__init__(message, error_code, 403)


class ResourceNotFoundError(IdentityServiceError):
    """Exception raised when a requested resource is not found."""

    def __init__(self, message: str, error_code: str = 'NOT_FOUND'):
        super().__init__(message, error_code, 404)


class ConflictError(IdentityServiceError):
    """Exception raised when a change would map one credential to two users."""

    def __init__(self, message: str, error_code: str = 'CONFLICT'):
        super().__init__(message, error_code, 409)


class StorageError(IdentityServiceError):
    """Exception raised when a store read or write cannot complete."""

    def __init__(self, message: str, error_code: str = 'STORAGE_ERROR', status_code: int = 500):
        super().__init__(message, error_code, status_code)


class BackendNotImplementedError(StorageError):
    """Exception raised by storage backends that exist only as placeholders."""

    def __init__(self, location: str, operation: str):
        super().__init__(
            f"Storage backend for '{location}' does not implement {operation}",
            'NOT_IMPLEMENTED',
            501
        )
        self.location = location
        self.operation = operation


class ConfigurationError(IdentityServiceError):
    """Exception raised for unusable configuration values."""

    def __init__(self, message: str, error_code: str = 'CONFIGURATION_ERROR'):
        super().__init__(message, error_code, 500)


def create_error_response(
    error: Exception,
    user_uuid: Optional[str] = None,
    include_details: bool = False
) -> Tuple[Dict[str, Any], int]:
    """
    Create a standardized error response with logging.

    Args:
        error: The exception that occurred
        user_uuid: Optional user identifier for logging
        include_details: Whether to include technical details (only in development)

    Returns:
        Tuple of (response dict, status code)
    """
    if isinstance(error, IdentityServiceError):
        status_code = error.status_code
        error_code = error.error_code
        message = error.message

        # Log based on severity
        if status_code >= 500:
            audit_logger.log_error(
                AuditEventType.ERROR_STORAGE if isinstance(error, StorageError) else AuditEventType.ERROR_APPLICATION,
                message=message,
                user_uuid=user_uuid,
                error_code=error_code
            )

        response = {
            'error': message,
            'error_code': error_code
        }

        if include_details:
            response['details'] = {k: v for k, v in error.__dict__.items()
                                   if k not in ['message', 'error_code', 'status_code']}

    # Handle unexpected exceptions
    else:
        status_code = 500
        error_code = 'INTERNAL_ERROR'

        audit_logger.log_error(
            AuditEventType.ERROR_APPLICATION,
            message=f'Unexpected error: {str(error)}',
            user_uuid=user_uuid,
            error_code=error_code,
            error_type=type(error).__name__
        )

        # Don't expose internal error details to users in production
        if include_details:
            message = str(error)
        else:
            message = 'An internal error occurred. Please try again later.'

        response = {
            'error': message,
            'error_code': error_code
        }

    return response, status_code


def create_success_response(
    data: Optional[Dict[str, Any]] = None,
    status_code: int = 200
) -> Tuple[Dict[str, Any], int]:
    """
    Create a standardized success response.

    The payload is returned flat so clients read ``userUUID`` at the top level.
    """
    response = dict(data) if data is not None else {}
    return response, status_code
