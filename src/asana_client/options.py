"""
Request option classes.

``Options`` carries the pagination, field-selection and output flags that can be
attached to any API call, either as client-wide defaults or per call.
``None`` on a field means "not set"; an explicitly empty value (``offset=""``,
``fields=[]``) is a deliberate "no value" that clears an earlier layer.
"""

from __future__ import annotations
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from .runtime.codec import to_query_string


class Options(BaseModel):
    """
    Options accepted by every API call.

    Query-string names follow the service's ``opt_`` convention; the JSON form
    used inside write bodies uses the bare names.
    """
    pretty: Optional[bool] = Field(default=None, description="Pretty-print the response")
    fields: Optional[List[str]] = Field(default=None, description="Fields to include in the response")
    expand: Optional[List[str]] = Field(default=None, description="Fields to expand in the response")
    limit: Optional[int] = Field(default=None, ge=1, le=100, description="Page size")
    offset: Optional[str] = Field(default=None, description="Opaque offset of the page to fetch")

    model_config = {"frozen": True}

    def to_query(self) -> Dict[str, List[str]]:
        """
        Convert to query parameters.

        Every set field produces a key. Empty values produce an empty list,
        which removes the key from an earlier layer when merged.
        """
        result: Dict[str, List[str]] = {}
        if self.pretty is not None:
            result["opt_pretty"] = [to_query_string(self.pretty)]
        if self.fields is not None:
            result["opt_fields"] = [",".join(self.fields)] if self.fields else []
        if self.expand is not None:
            result["opt_expand"] = [",".join(self.expand)] if self.expand else []
        if self.limit is not None:
            result["limit"] = [to_query_string(self.limit)]
        if self.offset is not None:
            result["offset"] = [self.offset] if self.offset else []
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON form sent in write bodies."""
        result: Dict[str, Any] = {}
        if self.pretty is not None:
            result["pretty"] = self.pretty
        if self.fields:
            result["fields"] = list(self.fields)
        if self.expand:
            result["expand"] = list(self.expand)
        if self.limit is not None:
            result["limit"] = self.limit
        if self.offset:
            result["offset"] = self.offset
        return result

    def merged_over(self, defaults: Optional[Options]) -> Options:
        """Return these options with unset fields filled from ``defaults``."""
        return merge_options(defaults, self)


OPTION_FIELDS = ("pretty", "fields", "expand", "limit", "offset")


def merge_options(*layers: Optional[Options]) -> Options:
    """
    Merge option layers from lowest to highest precedence.

    A field set on a later layer replaces the value from any earlier layer;
    a field left unset keeps the earlier value. Inputs are never modified.
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer is None:
            continue
        for name in OPTION_FIELDS:
            value = getattr(layer, name)
            if value is not None:
                merged[name] = value
    return Options(**merged)
