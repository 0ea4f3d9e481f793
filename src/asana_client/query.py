"""
Query-string encoding.

Requests and options are flattened into ``{key: [values]}`` mappings and layered
so that a later source replaces, never extends, the values an earlier source
set for the same key.
"""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import is_dataclass, fields
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, parse_qs

from pydantic import BaseModel

from .runtime.codec import to_query_string
from .runtime.errors import RequestBuildError

QueryValues = Dict[str, List[str]]


def query_values(value: Any) -> QueryValues:
    """
    Flatten a value into query parameters.

    Objects with a ``to_query()`` method (such as ``Options``) provide their
    own mapping. Pydantic models are read by alias, dataclass fields may
    rename their key with ``metadata={"query": "name"}``, and mappings are
    used as-is. ``None`` values are skipped and sequences become repeated
    values.

    Raises:
        TypeError: If the value or one of its fields cannot be encoded
    """
    if value is None:
        return {}

    to_query = getattr(value, "to_query", None)
    if callable(to_query):
        return {key: list(values) for key, values in to_query().items()}

    if isinstance(value, BaseModel):
        raw = value.model_dump(by_alias=True, exclude_none=True)
    elif is_dataclass(value) and not isinstance(value, type):
        raw = {f.metadata.get("query", f.name): getattr(value, f.name) for f in fields(value)}
    elif isinstance(value, Mapping):
        raw = dict(value)
    else:
        raise TypeError(f"Cannot encode {type(value).__name__} as query parameters")

    result: QueryValues = {}
    for key, item in raw.items():
        if item is None:
            continue
        if isinstance(item, (list, tuple, set, frozenset)):
            result[str(key)] = [to_query_string(v) for v in item]
        else:
            result[str(key)] = [to_query_string(item)]
    return result


def merge_query(query: QueryValues, values: QueryValues) -> QueryValues:
    """Return ``query`` with every key in ``values`` replaced."""
    merged = {key: list(items) for key, items in query.items()}
    for key, items in values.items():
        if items:
            merged[key] = list(items)
        else:
            merged.pop(key, None)
    return merged


def build_query(*sources: Any, operation: Optional[str] = None) -> QueryValues:
    """
    Layer sources from lowest to highest precedence into one query.

    Raises:
        RequestBuildError: If a source cannot be encoded
    """
    query: QueryValues = {}
    for source in sources:
        try:
            values = query_values(source)
        except (TypeError, ValueError) as e:
            raise RequestBuildError(
                f"Unable to marshal {type(source).__name__} to query parameters",
                stage="query", cause=e, operation=operation,
            ) from e
        query = merge_query(query, values)
    return query


def encode_query(query: QueryValues) -> str:
    """Encode to a query string without the leading ``?``."""
    return urlencode([(key, item) for key, items in query.items() for item in items])


def decode_query(query_string: str) -> QueryValues:
    """Parse a query string back into query parameters."""
    return parse_qs(query_string.lstrip("?"), keep_blank_values=True)
