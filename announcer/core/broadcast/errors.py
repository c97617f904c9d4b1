# announcer/core/broadcast/errors.py
"""
Typed errors for the broadcast pipeline.

Run-level errors (``ValidationError``, ``CapacityError``) carry an HTTP
status code so an outer transport can map them without inspecting
messages.  ``ChannelSendError`` never leaves the dispatcher: it is turned
into an entry of the failure histogram.
"""
from __future__ import annotations


class BroadcastError(Exception):
    """Base class for errors that abort a whole broadcast run."""

    code: str = "UNKNOWN_ERROR"
    status_code: int = 500

    def __init__(self, detail: str = "Internal error"):
        self.detail = detail
        super().__init__(f"{self.code}: {detail}")


class ValidationError(BroadcastError):
    """Malformed broadcast request (400)."""

    code = "VALIDATION_ERROR"
    status_code = 400


class CapacityError(BroadcastError):
    """Audience larger than the absolute cap for a live send (413)."""

    code = "TOO_MANY_TARGETS"
    status_code = 413

    def __init__(self, detail: str = "audience exceeds hard cap", *, targets: int | None = None, cap: int | None = None):
        self.targets = targets
        self.cap = cap
        super().__init__(detail)


class ChannelSendError(Exception):
    """Delivery of one message failed; ``reason`` is a short classified code."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
