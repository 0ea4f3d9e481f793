"""Shared base for resource models."""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel


class Resource(BaseModel):
    """
    Compact form of any Asana object.

    Only the identifying fields are declared; everything else the service
    returns is kept as extra attributes.
    """
    gid: Optional[str] = None
    name: Optional[str] = None
    resource_type: Optional[str] = None

    model_config = {"extra": "allow"}
