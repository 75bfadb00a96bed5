"""
Custom exceptions for Teacha.

Every application error carries the HTTP status it maps to and the public
error text returned to clients. ErrorHandlerMiddleware turns them into
``{"error": ..., "details": [...]}`` responses.
"""

from typing import Optional, List, Dict, Any


class TeachaError(Exception):
    """Base exception for all Teacha errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Public error message
            details: Field-level error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or []

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_response(self) -> Dict[str, Any]:
        """Response body for this error."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ConfigurationError(TeachaError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(TeachaError):
    """Raised when request data fails validation."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None,
                 details: Optional[List[Dict[str, Any]]] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Single field that failed validation
            details: Field-level details (takes precedence over ``field``)
        """
        if details is None and field:
            details = [{"field": field, "message": message}]
        super().__init__(message, details)
        self.field = field


class AuthenticationError(TeachaError):
    """Raised when a token or credentials cannot be verified."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AuthorizationError(TeachaError):
    """Raised when an authenticated identity lacks the required role."""

    status_code = 403

    def __init__(self, message: str = "Forbidden: insufficient role"):
        super().__init__(message)


class NotFoundError(TeachaError):
    """Raised when a referenced record does not exist."""

    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(TeachaError):
    """
    Raised when a unique value (email, slug, enrollment) is already taken.

    Duplicate values answer 400 rather than 409 across the API.
    """

    status_code = 400


class DatabaseError(TeachaError):
    """Raised when a database operation fails unexpectedly."""

    def __init__(self, message: str = "A database error occurred", operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class ServiceUnavailableError(TeachaError):
    """Raised when a required dependency (database) cannot be reached."""

    status_code = 503
