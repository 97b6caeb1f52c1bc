"""
Custom Exceptions for SalesAI Trainer

Hierarchical exception classes for proper error handling across layers.
Each exception maps to one HTTP status in app.main.
"""

from typing import Optional, Dict, Any


class SalesAIError(Exception):
    """Base exception for all SalesAI Trainer errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(SalesAIError):
    """Raised when input validation fails."""
    status_code = 400


class DatabaseError(SalesAIError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found (or not owned by the caller)."""
    status_code = 404


class InvalidStateError(SalesAIError):
    """Raised when a resource is not in the state an operation requires."""
    status_code = 400

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        expected_state: Optional[str] = None,
    ):
        details = {}
        if current_state:
            details["current_state"] = current_state
        if expected_state:
            details["expected_state"] = expected_state
        super().__init__(message, details)


class LimitReachedError(SalesAIError):
    """Raised when a subscription has no minutes left."""
    status_code = 400

    def __init__(
        self,
        message: str = "Subscription minute limit reached. Please upgrade your plan.",
        minutes_used: Optional[int] = None,
        minutes_limit: Optional[int] = None,
    ):
        details = {}
        if minutes_used is not None:
            details["minutes_used"] = minutes_used
        if minutes_limit is not None:
            details["minutes_limit"] = minutes_limit
        super().__init__(message, details)


class UpstreamServiceError(SalesAIError):
    """Raised when a third-party API answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        service: Optional[str] = None,
        body: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {"status": status_code}
        if service:
            details["service"] = service
        if body:
            details["body"] = body
        super().__init__(message, details, original_error)
        self.status_code = status_code


class AIServiceError(SalesAIError):
    """Raised when AI (chat completion) operations fail."""
    status_code = 502

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if model:
            details["model"] = model
        if operation:
            details["operation"] = operation
        super().__init__(message, details, original_error)


class ConfigurationError(SalesAIError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        setup: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        if setup:
            details["setup"] = setup
        super().__init__(message, details, original_error)
