# announcer/core/broadcast/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Channel(str, Enum):
    """Delivery medium. Each channel is backed by exactly one sender."""
    EMAIL = "EMAIL"
    SMS = "SMS"


# ============================================================================
# RECIPIENTS
# ============================================================================

@dataclass(frozen=True)
class Recipient:
    """
    Contact record produced by the member directory.

    Either contact method may be missing; a recipient with neither still
    counts as a target but yields no sends.
    """
    email: Optional[str] = None
    phone: Optional[str] = None
    member_id: Optional[str] = None

    def has_contact_for(self, channel: Channel) -> bool:
        if channel == Channel.EMAIL:
            return bool(self.email)
        if channel == Channel.SMS:
            return bool(self.phone)
        return False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.email is not None:
            data["email"] = self.email
        if self.phone is not None:
            data["phone"] = self.phone
        if self.member_id is not None:
            data["memberId"] = self.member_id
        return data


@dataclass(frozen=True)
class AudienceSelector:
    """Opaque selector handed to the directory as-is."""
    segment: str


# ============================================================================
# OUTCOMES
# ============================================================================

@dataclass
class RecipientOutcome:
    """Result of attempting every requested channel for one recipient."""
    email_sent: int = 0
    sms_sent: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class BatchTally:
    """Successful sends within a single batch."""
    email_sent: int = 0
    sms_sent: int = 0


@dataclass
class BroadcastTotals:
    """
    Aggregate result of a live broadcast run.

    ``targets`` counts every recipient pulled from the directory,
    ``sent`` counts successful attempts per channel and ``failed`` is the
    failure-reason histogram accumulated across all batches.
    """
    targets: int = 0
    sent: Dict[Channel, int] = field(
        default_factory=lambda: {Channel.EMAIL: 0, Channel.SMS: 0}
    )
    failed: Dict[str, int] = field(default_factory=dict)
    limit_reached: bool = False
    correlation_id: Optional[str] = None

    dry_run = False

    def add(self, tally: BatchTally, batch_size: int) -> None:
        self.targets += batch_size
        self.sent[Channel.EMAIL] += tally.email_sent
        self.sent[Channel.SMS] += tally.sms_sent

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "dryRun": False,
            "targets": self.targets,
            "sent": {channel.value: count for channel, count in self.sent.items()},
            "failed": dict(self.failed),
            "limitReached": self.limit_reached,
        }
        if self.correlation_id:
            data["requestId"] = self.correlation_id
        return data


@dataclass
class DryRunResult:
    """Preview of a broadcast: audience size and a small sample."""
    targets: int = 0
    sample: list[Recipient] = field(default_factory=list)
    limit_reached: bool = False
    correlation_id: Optional[str] = None

    dry_run = True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "dryRun": True,
            "targets": self.targets,
            "sample": [r.to_dict() for r in self.sample],
            "limitReached": self.limit_reached,
        }
        if self.correlation_id:
            data["requestId"] = self.correlation_id
        return data
