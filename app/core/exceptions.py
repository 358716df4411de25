"""
Custom exceptions for the scheduler console.

Provides a hierarchy of exceptions so callers can tell business failures,
authentication failures and transport failures apart.
"""

from typing import Any, Dict, Optional


class ConsoleError(Exception):
    """Base exception for all console errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ConsoleError):
    """Raised when there are configuration or wiring issues."""
    pass


class RequestPreparationError(ConsoleError):
    """Raised when an outbound request could not be prepared and was not sent."""
    pass


class ApiError(ConsoleError):
    """Base class for failures reported by the API client."""
    pass


class BusinessError(ApiError):
    """The server answered with an envelope carrying a nonzero code."""

    def __init__(self, code: int, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.code = code


class AuthInvalidError(BusinessError):
    """The envelope code says the caller's credentials are no longer valid."""
    pass


class TransportError(ApiError):
    """No envelope was received: network failure, timeout or HTTP error status."""

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        cause: Optional[BaseException] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.http_status = http_status
        self.cause = cause


class ResponseFormatError(ApiError):
    """A successful envelope carried data that does not match the expected shape."""
    pass
