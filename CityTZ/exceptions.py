"""
Custom exceptions for the CityTZ package.

This module defines a hierarchical exception system that provides:
1. Specific, technical error information for debugging and logging
2. User-friendly error messages for end-users
3. Error codes for consistent error identification
4. Optional context information for additional debugging

The query layer raises four structured kinds: DataLoadError, SearchError,
ValidationError and CacheError. The service layer adds RateLimitError and
ResourceError for admission control.
"""

from typing import Optional, Dict, Any
import traceback
import sys

class CityTZError(Exception):
    """Base exception for all CityTZ errors."""

    # Default values
    status_code = 500
    error_code = "TZ-GENERIC-ERROR"
    user_message = "An unexpected error occurred."

    def __init__(
        self,
        message: str = None,
        user_message: str = None,
        error_code: str = None,
        status_code: int = None,
        context: Dict[str, Any] = None,
        cause: Exception = None,
        include_traceback: bool = True
    ):
        # Technical message for logs
        self.message = message or self.__class__.__doc__ or "An error occurred."
        super().__init__(self.message)

        # User-friendly message
        self.user_message = user_message or self.__class__.user_message

        # Error codes
        self.error_code = error_code or self.__class__.error_code
        self.status_code = status_code or self.__class__.status_code

        # Additional context
        self.context = context or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

        # Capture traceback if requested
        self.traceback = None
        if include_traceback:
            self.traceback = traceback.format_exc() if sys.exc_info()[0] else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the exception to a dictionary for API responses."""
        error_dict = {
            "error_code": self.error_code,
            "message": self.user_message,
            "status_code": self.status_code,
        }

        # Include technical details only in debug mode or for logging
        if 'debug' in self.context and self.context.get('debug'):
            error_dict["technical_details"] = {
                "message": self.message,
                "context": {k: v for k, v in self.context.items() if k != 'debug'},
            }
            if self.traceback:
                error_dict["technical_details"]["traceback"] = self.traceback
            if self.cause:
                error_dict["technical_details"]["cause"] = str(self.cause)

        return error_dict

# Data Errors - 2000 range
class DataError(CityTZError):
    """Base exception for all data-related errors."""
    status_code = 400
    error_code = "TZ-DATA-2000"
    user_message = "An error occurred with the requested data."

class DataLoadError(DataError):
    """Exception raised when the city dataset could not be produced."""
    status_code = 500
    error_code = "TZ-DATA-2001"
    user_message = "City data is currently unavailable."

    def __init__(self, operation: str, cause: Exception, **kwargs: Any):
        self.operation = operation
        kwargs.setdefault('context', {'operation': operation})
        super().__init__(
            message=f"failed to load city data during {operation}: {cause}",
            cause=cause,
            **kwargs
        )

class ValidationError(DataError):
    """
    Exception raised when input fails a precondition.

    Always recoverable: the caller can fix the input and retry. The message
    carries the offending value only when one was supplied, so messages for
    absent values stay comparable.

    Attributes:
        field: Name of the field that failed validation
        reason: Short, stable reason (e.g. "too long", "suspicious pattern")
        detail: Optional longer explanation used in the message
        value: Offending value, if any
    """
    status_code = 400
    error_code = "TZ-DATA-2003"
    user_message = "The provided input is invalid. Please check your query."

    def __init__(self, field: str, reason: str, value: Any = None,
                 detail: Optional[str] = None, **kwargs: Any):
        self.field = field
        self.reason = reason
        self.detail = detail or reason
        self.value = value

        message = f"validation error for field '{field}': {self.detail}"
        if value is not None:
            message += f" (value: {value})"

        kwargs.setdefault('context', {'field': field, 'reason': reason})
        kwargs.setdefault('user_message', f"Invalid {field}: {reason}.")
        super().__init__(message=message, **kwargs)

# Search Errors - 6000 range
class SearchError(CityTZError):
    """
    Exception raised when a named search operation fails.

    Always wraps a lower-level cause (validation or data load); it never
    originates on its own.
    """
    status_code = 500
    error_code = "TZ-SEARCH-6001"
    user_message = "The search could not be completed."

    def __init__(self, query: str, operation: str, cause: Exception, **kwargs: Any):
        self.query = query
        self.operation = operation

        # Surface the cause's status and user message so callers can report
        # a validation problem as a client error.
        if isinstance(cause, CityTZError):
            kwargs.setdefault('status_code', cause.status_code)
            kwargs.setdefault('user_message', cause.user_message)

        kwargs.setdefault('context', {'query': query, 'operation': operation})
        super().__init__(
            message=f"search error for query '{query}' during {operation}: {cause}",
            cause=cause,
            **kwargs
        )

# Cache Errors - 5000 range
class CacheError(CityTZError):
    """
    Exception raised when a cache backend fails.

    The in-memory cache never raises it; alternate backends report failures
    through it without changing the cache contract.
    """
    error_code = "TZ-CACHE-5001"
    user_message = "A caching error occurred."

    def __init__(self, operation: str, key: str, cause: Exception, **kwargs: Any):
        self.operation = operation
        self.key = key
        kwargs.setdefault('context', {'operation': operation, 'key': key})
        super().__init__(
            message=f"cache error during {operation} for key '{key}': {cause}",
            cause=cause,
            **kwargs
        )

# API Errors - 3000 range
class APIError(CityTZError):
    """Base exception for all API-related errors."""
    status_code = 400
    error_code = "TZ-API-3000"
    user_message = "An API error occurred while processing your request."

class RateLimitError(APIError):
    """Exception raised when a client exceeds its request rate."""
    status_code = 429
    error_code = "TZ-API-3003"
    user_message = "Rate limit exceeded. Please try again later."

class InvalidParameterError(APIError):
    """Exception raised when API parameters are invalid."""
    status_code = 400
    error_code = "TZ-API-3004"
    user_message = "Invalid parameters provided. Please check your request."

# System Errors - 4000 range
class SystemError(CityTZError):
    """Base exception for all system-related errors."""
    status_code = 500
    error_code = "TZ-SYS-4000"
    user_message = "A system error occurred. Please try again later."

class ConfigError(SystemError):
    """Exception raised when there's an error in system configuration."""
    error_code = "TZ-SYS-4001"
    user_message = "The system is incorrectly configured. Please contact support."

class ResourceError(SystemError):
    """Exception raised when the search resource budget is exhausted."""
    status_code = 503
    error_code = "TZ-SYS-4002"
    user_message = "System resources are currently unavailable. Please try again later."
