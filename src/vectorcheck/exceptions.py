"""
Exception classes for vectorcheck.
"""

from typing import Any, Dict, Optional


class VectorCheckError(Exception):
    """Base exception for all vectorcheck errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(VectorCheckError):
    """Raised when there's an error in configuration."""

    pass


class TransportError(VectorCheckError):
    """Raised when a request could not be issued or no response arrived."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if url:
            details["url"] = url
        super().__init__(message, details, cause)
        self.url = url


class AuthError(VectorCheckError):
    """Raised when login does not yield a usable bearer token."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details, cause)
        self.status_code = status_code


class CheckFailedError(VectorCheckError):
    """Raised by a stress check whose expectation about the response did not hold."""

    pass
