"""
JSON codec helpers for request payloads and query values.

Converts pydantic models, dataclasses, dates and enums into plain JSON values
before they are written to a request body or a query string.
"""

from __future__ import annotations
import json
from typing import Any
from datetime import date, datetime
from dataclasses import is_dataclass, fields
from enum import Enum

from pydantic import BaseModel


def to_json_value(value: Any) -> Any:
    """
    Convert a value to its plain JSON form.

    Pydantic models are dumped by alias with unset fields omitted, matching
    the way the service expects sparse write payloads.

    Raises:
        TypeError: If the value has no JSON representation
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    elif isinstance(value, Enum):
        return to_json_value(value.value)
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    elif is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_json_value(getattr(value, f.name))
            for f in fields(value)
            if getattr(value, f.name) is not None
        }
    elif isinstance(value, dict):
        return {str(key): to_json_value(val) for key, val in value.items()}
    elif isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(item) for item in value]
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(obj: Any, indent: int = None) -> str:
    """Serialize a value to a JSON string."""
    return json.dumps(to_json_value(obj), indent=indent, ensure_ascii=False)


def to_query_string(value: Any) -> str:
    """Render a scalar as a query-string value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, Enum):
        return to_query_string(value.value)
    elif isinstance(value, (datetime, date)):
        return value.isoformat()
    elif isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} cannot be a query value")
