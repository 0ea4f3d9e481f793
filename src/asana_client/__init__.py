"""
Asana Python Client

Transport layer for the Asana REST API: layered request options, query
encoding, JSON and multipart request building, response envelope decoding
and cursor pagination, plus thin resource call sites built on top.
"""

from .client import Client, ClientConfig, BASE_URL, FAST_API_HEADER
from .options import Options, merge_options
from .query import query_values, merge_query, build_query, encode_query, decode_query
from .envelope import Envelope, ErrorDetail, parse_response
from .pagination import NextPage, iter_pages, fetch_all
from .validation import Validator, validate_payload
from .runtime.errors import *

__version__ = "1.0.0"
__all__ = [
    # Client
    "Client",
    "ClientConfig",
    "BASE_URL",
    "FAST_API_HEADER",

    # Options and query encoding
    "Options",
    "merge_options",
    "query_values",
    "merge_query",
    "build_query",
    "encode_query",
    "decode_query",

    # Responses and pagination
    "Envelope",
    "ErrorDetail",
    "parse_response",
    "NextPage",
    "iter_pages",
    "fetch_all",

    # Validation
    "Validator",
    "validate_payload",

    # Errors
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
