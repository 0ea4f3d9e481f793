"""
Asana API Client

This module provides the transport for the Asana REST API: the client
configuration and the four request primitives (``get``, ``post``, ``put``,
``post_multipart``) that resource call sites are built on.

Requests are built from layered options, payloads are validated before
anything is sent, and every response goes through the envelope decoder.
Failures are raised as ``AsanaError`` subclasses; nothing is retried.
"""

from __future__ import annotations
import dataclasses
import logging
from contextlib import closing
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union

import requests

from .envelope import parse_response
from .multipart import MultipartFile
from .options import Options, merge_options
from .pagination import DEFAULT_PAGE_SIZE, NextPage, fetch_all
from .query import build_query, encode_query
from .runtime.codec import dumps
from .runtime.errors import (
    ConnectionFailedError,
    InvalidPathError,
    RequestBuildError,
    TimeoutError,
    TransportError,
)
from .validation import validate_payload

BASE_URL = "https://app.asana.com/api/1.0"
FAST_API_HEADER = "Asana-Fast-Api"
PACKAGE_LOGGER = "asana_client"


@dataclass
class ClientConfig:
    """Configuration for the Asana API client."""

    base_url: str = BASE_URL
    access_token: Optional[str] = None
    timeout: Optional[float] = 30.0
    fast_api: bool = True
    debug: bool = False
    verbosity: int = 0
    verify_ssl: bool = True
    user_agent: str = "asana-client-python/1.0.0"
    default_options: Options = field(default_factory=Options)


class Client:
    """
    Asana API Client

    Provides the request primitives used by resource call sites:
    - Query-string reads with layered default, filter and call options
    - JSON-bodied writes wrapped as ``{"data": ..., "options": ...}``
    - Streaming single-file multipart uploads
    - Envelope decoding into pydantic types, with pagination cursors

    The client holds no per-call state. Each call reads one snapshot of
    ``config``, so a client may be shared between threads.
    """

    def __init__(self, config: Union[str, ClientConfig, None] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the Asana API client.

        Args:
            config: A base URL string, a ClientConfig, or None for defaults
            session: Optional requests.Session for connection pooling
        """
        if config is None:
            self.config = ClientConfig()
        elif isinstance(config, str):
            self.config = ClientConfig(base_url=config)
        else:
            self.config = config

        self.logger = logging.getLogger(__name__)
        self._apply_debug(was_debug=False)

        self._session = session or requests.Session()
        self._owns_session = session is None

    @property
    def session(self) -> requests.Session:
        return self._session

    def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def reconfigure(self, **changes: Any) -> ClientConfig:
        """
        Replace configuration fields, e.g. ``client.reconfigure(fast_api=False)``.

        Calls already in flight keep the configuration they started with.
        """
        was_debug = self.config.debug
        self.config = dataclasses.replace(self.config, **changes)
        self._apply_debug(was_debug)
        return self.config

    # ==== Diagnostics ====

    def _apply_debug(self, was_debug: bool) -> None:
        """Open or close the package logger for DEBUG records as ``debug`` toggles."""
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        if self.config.debug:
            package_logger.setLevel(logging.DEBUG)
        elif was_debug:
            package_logger.setLevel(logging.NOTSET)

    def _debug_logger(self, config: ClientConfig) -> Optional[logging.Logger]:
        return self.logger if config.debug else None

    def info(self, message: str, *args: Any) -> None:
        """Log a progress message when verbosity is at least 1."""
        if self.config.verbosity >= 1:
            self.logger.info(message, *args)

    def trace(self, message: str, *args: Any) -> None:
        """Log a detailed progress message when verbosity is at least 2."""
        if self.config.verbosity >= 2:
            self.logger.info(message, *args)

    # ==== Request plumbing ====

    @staticmethod
    def _url(config: ClientConfig, path: str) -> str:
        if not path.startswith("/"):
            raise InvalidPathError(f"Invalid API path: {path!r}")
        return config.base_url.rstrip("/") + path

    @staticmethod
    def _headers(config: ClientConfig, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": config.user_agent,
        }
        if config.access_token:
            headers["Authorization"] = f"Bearer {config.access_token}"
        if content_type:
            headers["Content-Type"] = content_type
        if config.fast_api:
            headers[FAST_API_HEADER] = "true"
        return headers

    def _send(self, config: ClientConfig, method: str, url: str, operation: str,
              headers: Dict[str, str], body: Any = None) -> requests.Response:
        """Prepare and send one request, mapping requests' failures to AsanaErrors."""
        try:
            prepared = self._session.prepare_request(
                requests.Request(method, url, headers=headers, data=body)
            )
            settings = self._session.merge_environment_settings(
                prepared.url, {}, None, config.verify_ssl, None
            )
        except (requests.RequestException, ValueError, TypeError) as e:
            raise RequestBuildError("Request error", stage="build", cause=e, operation=operation) from e

        try:
            return self._session.send(prepared, timeout=config.timeout, **settings)
        except requests.Timeout as e:
            raise TimeoutError(f"{method} error: {e}", cause=e, operation=operation) from e
        except requests.ConnectionError as e:
            raise ConnectionFailedError(f"{method} error: {e}", cause=e, operation=operation) from e
        except requests.RequestException as e:
            raise TransportError(f"{method} error: {e}", cause=e, operation=operation) from e

    # ==== Primitives ====

    def get(self, path: str, data: Any = None, result_type: Any = None,
            *options: Optional[Options]) -> Tuple[Any, Optional[NextPage]]:
        """
        Make a GET request.

        Query parameters are layered from the client's default options, then
        the fields of ``data``, then each of ``options`` in order; a later
        layer replaces the values of any key it sets.

        Args:
            path: API path starting with ``/``
            data: Optional filter value (pydantic model, dataclass or mapping)
            result_type: Type to decode the response data into
            options: Per-call options

        Returns:
            Tuple of the decoded data and the next-page cursor

        Raises:
            InvalidPathError: If the path does not start with ``/``
            AsanaError: On validation, build, transport, protocol or API failures
        """
        config = self.config
        operation = f"GET {path}"
        url = self._url(config, path)

        if config.debug:
            self.logger.debug("Default options: %r", config.default_options)
            if data is not None:
                self.logger.debug("Data: %r", data)
            for opts in options:
                self.logger.debug("Options: %r", opts)

        validate_payload(data, operation)
        query = build_query(config.default_options, data, *options, operation=operation)
        if query:
            encoded = encode_query(query)
            url = f"{url}?{encoded}"
            path = f"{path}?{encoded}"

        if config.debug:
            self.logger.debug("GET %s", path)

        response = self._send(config, "GET", url, operation, self._headers(config))
        return parse_response(response, result_type, operation, self._debug_logger(config))

    def post(self, path: str, data: Any, result_type: Any = None, *options: Optional[Options]) -> Any:
        """Make a POST request with a JSON body. See ``_do``."""
        return self._do("POST", path, data, result_type, options)

    def put(self, path: str, data: Any, result_type: Any = None, *options: Optional[Options]) -> Any:
        """Make a PUT request with a JSON body. See ``_do``."""
        return self._do("PUT", path, data, result_type, options)

    def _do(self, method: str, path: str, data: Any, result_type: Any,
            options: Tuple[Optional[Options], ...]) -> Any:
        """
        Send ``{"data": data, "options": merged}`` as JSON.

        Call options are merged over the client defaults; defaults only fill
        fields the call left unset. ``options`` is omitted from the body when
        nothing is set.

        Returns:
            The decoded response data

        Raises:
            InvalidPathError: If the path does not start with ``/``
            AsanaError: On validation, build, transport, protocol or API failures
        """
        config = self.config
        operation = f"{method} {path}"
        url = self._url(config, path)

        merged = merge_options(config.default_options, *options)
        validate_payload(data, operation)

        request: Dict[str, Any] = {"data": data}
        merged_dict = merged.to_dict()
        if merged_dict:
            request["options"] = merged_dict

        try:
            body = dumps(request)
        except (TypeError, ValueError) as e:
            raise RequestBuildError("Unable to serialize request body", stage="serialize",
                                    cause=e, operation=operation) from e

        if config.debug:
            self.logger.debug("%s %s\n%s", method, path, dumps(request, indent=2))

        response = self._send(config, method, url, operation,
                              self._headers(config, "application/json"), body.encode("utf-8"))
        result, _ = parse_response(response, result_type, operation, self._debug_logger(config))
        return result

    def post_multipart(self, path: str, field: str, stream: BinaryIO, filename: str,
                       content_type: Optional[str] = None, result_type: Any = None) -> Any:
        """
        Upload a file as a single ``multipart/form-data`` part.

        The file is streamed from ``stream`` while the request is sent, and
        ``stream`` is closed when the call returns or fails.

        Args:
            path: API path starting with ``/``
            field: Form field name of the file part
            stream: Readable binary stream with the file content
            filename: Filename reported to the service
            content_type: MIME type of the file
            result_type: Type to decode the response data into

        Returns:
            The decoded response data
        """
        with closing(stream):
            config = self.config
            operation = f"POST {path}"
            url = self._url(config, path)

            if config.debug:
                self.logger.debug("POST multipart %s\n%s=%s;ContentType=%s",
                                  path, field, filename, content_type)

            try:
                part = MultipartFile(field, filename, content_type)
            except (TypeError, AttributeError, UnicodeError) as e:
                raise RequestBuildError("Unable to create multipart header", stage="build",
                                        cause=e, operation=operation) from e

            response = self._send(config, "POST", url, operation,
                                  self._headers(config, part.content_type), part.iter_body(stream))
            result, _ = parse_response(response, result_type, operation, self._debug_logger(config))
        return result

    # ==== Listing helpers ====

    def get_all(self, path: str, data: Any = None, item_type: Any = None,
                *options: Optional[Options], page_size: int = DEFAULT_PAGE_SIZE) -> List[Any]:
        """
        Fetch every page of a listing.

        ``page_size`` must be between 1 and 100.

        Returns:
            All items in order. Any failure aborts the listing and is raised.

        Raises:
            InvalidPageSizeError: If ``page_size`` is outside 1..100
        """
        result_type = List[item_type] if item_type is not None else None

        def fetch(*page_options: Optional[Options]) -> Tuple[Any, Optional[NextPage]]:
            return self.get(path, data, result_type, *page_options)

        return fetch_all(fetch, *options, page_size=page_size)
