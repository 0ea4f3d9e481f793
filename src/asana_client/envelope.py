"""
Response envelope decoding.

Every API response is wrapped as ``{"data": ..., "next_page": ..., "errors": ...}``.
``parse_response`` turns a ``requests.Response`` into a decoded result and
cursor, or raises the matching ``AsanaError``.
"""

from __future__ import annotations
import logging
from functools import lru_cache
from typing import Any, List, Optional, Tuple

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from .pagination import NextPage
from .runtime.errors import APIError, MissingDataError, ResponseDecodeError, TransportError

SUCCESS_STATUSES = (200, 201)


class ErrorDetail(BaseModel):
    """One entry of the envelope's ``errors`` list."""
    message: Optional[str] = None
    help: Optional[str] = None
    phrase: Optional[str] = None

    model_config = {"extra": "allow"}


class Envelope(BaseModel):
    """The uniform response wrapper. ``data`` is kept as raw JSON until decoded."""
    data: Any = None
    next_page: Optional[NextPage] = None
    errors: Optional[List[ErrorDetail]] = None


@lru_cache(maxsize=256)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def decode_data(data: Any, result_type: Any, operation: Optional[str] = None) -> Any:
    """
    Decode an envelope's ``data`` into ``result_type``.

    ``None`` as the result type returns the raw JSON value.

    Raises:
        ResponseDecodeError: If the data does not fit the type
    """
    if result_type is None:
        return data
    try:
        return _adapter(result_type).validate_python(data)
    except ValidationError as e:
        raise ResponseDecodeError(
            f"Unable to decode response data as {getattr(result_type, '__name__', result_type)}",
            stage="data", cause=e, operation=operation,
        ) from e


def _retry_after(response: requests.Response) -> Optional[int]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_response(response: requests.Response, result_type: Any = None,
                   operation: Optional[str] = None,
                   logger: Optional[logging.Logger] = None) -> Tuple[Any, Optional[NextPage]]:
    """
    Decode a response envelope.

    Args:
        response: The HTTP response; always closed before returning
        result_type: Type to decode ``data`` into, e.g. ``Project`` or ``List[Project]``
        operation: Method and path of the call, for error context
        logger: When given, the raw response is logged to it at DEBUG level

    Returns:
        Tuple of the decoded data and the next-page cursor (``None`` when exhausted)

    Raises:
        TransportError: If the body could not be read
        ResponseDecodeError: If the body is not a valid envelope or data has the wrong shape
        APIError: If the status is not 200 or 201
        MissingDataError: If a successful response has no data
    """
    try:
        body = response.content
    except requests.RequestException as e:
        raise TransportError(f"Unable to read response body: {e}", cause=e, operation=operation) from e
    finally:
        response.close()

    if logger is not None:
        logger.debug("%s %s\n%s", response.status_code, response.reason,
                     body.decode("utf-8", errors="replace"))

    try:
        envelope = Envelope.model_validate_json(body or b"")
    except ValidationError as e:
        raise ResponseDecodeError(
            "Unable to decode response envelope", stage="envelope",
            details={"status_code": response.status_code}, cause=e, operation=operation,
        ) from e

    if response.status_code not in SUCCESS_STATUSES:
        raise APIError(response.status_code, envelope.errors,
                       retry_after=_retry_after(response), operation=operation)

    if envelope.data is None:
        raise MissingDataError(details={"status_code": response.status_code}, operation=operation)

    return decode_data(envelope.data, result_type, operation), envelope.next_page
