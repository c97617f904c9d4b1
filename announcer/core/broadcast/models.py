# announcer/core/broadcast/models.py
"""
Pydantic request model for a broadcast.

Kept outside any transport layer so the service validates payloads the
same way whether they come from an HTTP handler, a job or the CLI.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from announcer.core.broadcast.domain import AudienceSelector, Channel


class AudienceIn(BaseModel):
    segment: str

    @field_validator("segment")
    @classmethod
    def segment_must_be_nonblank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("audience segment is required")
        return v.strip()

    def to_selector(self) -> AudienceSelector:
        return AudienceSelector(segment=self.segment)


class BroadcastRequest(BaseModel):
    """A validated broadcast announcement request."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    channels: list[Channel] = Field(..., min_length=1)
    audience: AudienceIn
    dry_run: bool = Field(default=False, alias="dryRun")
    correlation_id: str | None = Field(default=None, alias="correlationId", max_length=128)

    @field_validator("message")
    @classmethod
    def message_must_be_nonblank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message cannot be empty")
        return v.strip()

    @field_validator("channels")
    @classmethod
    def channels_deduplicated(cls, v: list[Channel]) -> list[Channel]:
        return list(dict.fromkeys(v))
