"""Runtime helpers for the Asana Python client"""

from .errors import (
    ErrorCode,
    InvalidPathError,
    InvalidPageSizeError,
    AsanaError,
    PayloadValidationError,
    RequestBuildError,
    TransportError,
    ConnectionFailedError,
    TimeoutError,
    ProtocolError,
    ResponseDecodeError,
    MissingDataError,
    APIError,
)
from .codec import to_json_value, dumps

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
    "to_json_value",
    "dumps",
]
