"""Payload self-validation capability."""

from __future__ import annotations
import inspect
from typing import Any, Optional, Protocol, runtime_checkable

from .runtime.errors import PayloadValidationError


@runtime_checkable
class Validator(Protocol):
    """A payload that can check itself before it is sent.

    ``validate()`` raises ``PayloadValidationError`` or ``ValueError`` when the
    payload is not acceptable.
    """

    def validate(self) -> None:
        ...


def _validator_of(payload: Any):
    if payload is None or not isinstance(payload, Validator):
        return None
    # pydantic models inherit a deprecated ``validate`` classmethod
    if isinstance(inspect.getattr_static(type(payload), "validate", None), classmethod):
        return None
    return payload.validate


def validate_payload(payload: Any, operation: Optional[str] = None) -> None:
    """
    Run the payload's own validation, if it has one.

    Raises:
        PayloadValidationError: If the payload rejects itself
    """
    validate = _validator_of(payload)
    if validate is None:
        return
    try:
        validate()
    except PayloadValidationError as e:
        if e.operation is None:
            e.operation = operation
        raise
    except ValueError as e:
        raise PayloadValidationError(str(e), cause=e, operation=operation) from e
