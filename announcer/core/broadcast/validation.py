# announcer/core/broadcast/validation.py
"""Pre-flight validation shared by live and dry-run broadcasts."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from announcer.core.broadcast.errors import ValidationError
from announcer.core.broadcast.models import BroadcastRequest

_FIELD_MESSAGES = {
    "message": "message cannot be empty",
    "channels": "need at least one channel",
    "audience": "audience segment is required",
}


def _describe(error: dict) -> str:
    loc = error.get("loc") or ()
    field_name = str(loc[0]) if loc else ""

    # Unknown channel value, e.g. ("channels", 1)
    if field_name == "channels" and len(loc) > 1:
        return f"unsupported channel: {error.get('input')!r}"

    if field_name in _FIELD_MESSAGES:
        return _FIELD_MESSAGES[field_name]

    return error.get("msg", "invalid input")


def validate_broadcast_input(raw: Any) -> BroadcastRequest:
    """
    Validate a broadcast request before anything touches the directory.

    Accepts a mapping (e.g. a decoded JSON body) or an already built
    ``BroadcastRequest``.

    Raises:
        ValidationError: on the first problem found, in field order
            message → channels → audience.
    """
    if isinstance(raw, BroadcastRequest):
        return raw

    if not isinstance(raw, Mapping):
        raise ValidationError("Input must be an object")

    try:
        return BroadcastRequest.model_validate(dict(raw))
    except PydanticValidationError as exc:
        errors = exc.errors()
        raise ValidationError(_describe(errors[0]) if errors else "invalid input") from exc
