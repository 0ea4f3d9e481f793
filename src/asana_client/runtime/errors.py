"""
Asana Client Error Model

This module provides the error handling framework for the Asana Python client.
Every failure raised by the transport is an ``AsanaError`` subclass carrying the
operation that failed (``"GET /projects/123"``), a catalog code, and the
underlying cause when there is one.

Malformed call arguments are programming errors and raise ``InvalidPathError``,
which is a ``ValueError`` rather than an ``AsanaError``.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List, TYPE_CHECKING
from enum import IntEnum

if TYPE_CHECKING:
    from ..envelope import ErrorDetail

__all__ = [
    "ErrorCode",
    "InvalidPathError",
    "InvalidPageSizeError",
    "AsanaError",
    "PayloadValidationError",
    "RequestBuildError",
    "TransportError",
    "ConnectionFailedError",
    "TimeoutError",
    "ProtocolError",
    "ResponseDecodeError",
    "MissingDataError",
    "APIError",
    "api_error_code",
]


class ErrorCode(IntEnum):
    """Error codes for client-side stages and API failures."""

    UNKNOWN = 1

    # Client-side errors (100-199)
    VALIDATION_FAILED = 100
    QUERY_ENCODING_FAILED = 101
    SERIALIZATION_FAILED = 102
    REQUEST_BUILD_FAILED = 103

    # Transport errors (200-299)
    TRANSPORT_FAILED = 200
    CONNECTION_FAILED = 201
    TIMEOUT = 202

    # Protocol errors (300-399)
    INVALID_ENVELOPE = 300
    MISSING_DATA = 301
    INVALID_DATA = 302

    # API errors, valued by HTTP status
    INVALID_REQUEST = 400
    NO_AUTHORIZATION = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    RATE_LIMIT_ENFORCED = 429
    SERVER_ERROR = 500
    API_ERROR = 1000


_STATUS_CODES = {
    400: ErrorCode.INVALID_REQUEST,
    401: ErrorCode.NO_AUTHORIZATION,
    402: ErrorCode.PAYMENT_REQUIRED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    429: ErrorCode.RATE_LIMIT_ENFORCED,
    500: ErrorCode.SERVER_ERROR,
}


class InvalidPathError(ValueError):
    """An API path that is not rooted at ``/``."""


class InvalidPageSizeError(ValueError):
    """A pagination page size outside the range the service accepts."""


class AsanaError(Exception):
    """
    Base class for all Asana client errors.

    Provides structured error information: a catalog code, optional details,
    the exception that caused it, and the operation being performed.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[BaseException] = None,
                 operation: Optional[str] = None):
        """
        Initialize an Asana error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
            operation: Method and path of the failing call
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause
        self.operation = operation

    def __str__(self) -> str:
        """String representation of the error."""
        prefix = f"{self.operation}: " if self.operation else ""
        parts = [f"[{self.code.name}] {prefix}{self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.operation:
            result["operation"] = self.operation
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class PayloadValidationError(AsanaError):
    """A payload rejected its own validation check before sending."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None, operation: Optional[str] = None):
        super().__init__(message, ErrorCode.VALIDATION_FAILED, details, cause, operation)


class RequestBuildError(AsanaError):
    """Failure to encode the query, serialize the body, or prepare the request."""

    _STAGE_CODES = {
        "query": ErrorCode.QUERY_ENCODING_FAILED,
        "serialize": ErrorCode.SERIALIZATION_FAILED,
        "build": ErrorCode.REQUEST_BUILD_FAILED,
    }

    def __init__(self, message: str, stage: str = "build", details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None, operation: Optional[str] = None):
        code = self._STAGE_CODES.get(stage, ErrorCode.REQUEST_BUILD_FAILED)
        super().__init__(message, code, details, cause, operation)
        self.stage = stage


class TransportError(AsanaError):
    """The HTTP round trip itself failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None, operation: Optional[str] = None):
        super().__init__(message, ErrorCode.TRANSPORT_FAILED, details, cause, operation)


class ConnectionFailedError(TransportError):
    """Connection failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None, operation: Optional[str] = None):
        super().__init__(message, details, cause, operation)
        self.code = ErrorCode.CONNECTION_FAILED


class TimeoutError(TransportError):
    """Request timeouts."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None, operation: Optional[str] = None):
        super().__init__(message, details, cause, operation)
        self.code = ErrorCode.TIMEOUT


class ProtocolError(AsanaError):
    """The response does not follow the envelope contract."""


class ResponseDecodeError(ProtocolError):
    """The envelope or its data could not be decoded."""

    def __init__(self, message: str, stage: str = "envelope", details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None, operation: Optional[str] = None):
        code = ErrorCode.INVALID_DATA if stage == "data" else ErrorCode.INVALID_ENVELOPE
        super().__init__(message, code, details, cause, operation)
        self.stage = stage


class MissingDataError(ProtocolError):
    """A successful response carried no data."""

    def __init__(self, message: str = "Missing data from response", details: Optional[Dict[str, Any]] = None,
                 operation: Optional[str] = None):
        super().__init__(message, ErrorCode.MISSING_DATA, details, None, operation)


class APIError(AsanaError):
    """
    The service answered with a status other than 200 or 201.

    ``errors`` is the list reported in the response envelope, unchanged.
    """

    def __init__(self, status_code: int, errors: Optional[List[ErrorDetail]] = None,
                 retry_after: Optional[int] = None, operation: Optional[str] = None):
        self.status_code = status_code
        self.errors = list(errors or [])
        self.retry_after = retry_after
        code = api_error_code(status_code)

        if self.errors:
            message = "; ".join(e.message or "" for e in self.errors)
        else:
            message = f"HTTP {status_code}"

        details: Dict[str, Any] = {"status_code": status_code}
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(message, code, details, None, operation)

    @property
    def type(self) -> str:
        """Catalog name of the failure, e.g. ``not_found``."""
        if self.code == ErrorCode.API_ERROR:
            return "unknown"
        return self.code.name.lower()

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_recoverable(self) -> bool:
        """Whether the same request may succeed later (rate limit or server error)."""
        return self.status_code == 429 or self.status_code >= 500


def api_error_code(status_code: int) -> ErrorCode:
    """Map an HTTP status to its catalog code."""
    return _STATUS_CODES.get(status_code, ErrorCode.API_ERROR)
