"""
Common Exception Classes

Exceptions raised by the analytics and difficulty components. Absent data is
never an error in this package; these are reserved for inputs that break a
caller's precondition and must propagate.
"""

from typing import Optional, Any


class BaseError(Exception):
    """Base class for all package exceptions."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            original_exception: Exception that caused this error, if any
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class ValidationError(BaseError):
    """Raised when a value is outside the range an operation accepts."""

    def __init__(self, message: str, errors: Optional[dict] = None):
        """
        Initialize the validation error.

        Args:
            message: Error message
            errors: Mapping of field name to problem description
        """
        super().__init__(f"Validation error: {message}")
        self.errors = errors or {}


class ConfigurationError(BaseError):
    """Raised for unreadable or inconsistent configuration."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: The configuration key or file that caused the error
            original_exception: Underlying parse/IO error, if any
        """
        super().__init__(f"Configuration error: {message}", original_exception)
        self.config_key = config_key


class NotFoundError(BaseError):
    """Raised when a lookup that must succeed finds nothing."""

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize the not found error.

        Args:
            resource_type: Type of resource that wasn't found
            resource_id: ID of the resource that wasn't found
        """
        super().__init__(f"{resource_type} with ID {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id
