"""
Broadcast pipeline: announcement fan-out to a member audience.

This package holds the only stateful coordination in the service:
- ``validation``: pre-flight checks on the broadcast request
- ``dispatcher``: batched concurrent sends per recipient/channel
- ``aggregator``: per-batch outcome folding into running totals
- ``governor``: recipient ceiling and progress markers
- ``dry_run``: preview mode that counts and samples without sending
- ``service``: entry point wiring the above together

Directory and provider integrations are consumed through ``ports`` only.
"""
from announcer.core.broadcast.domain import (
    BroadcastTotals,
    Channel,
    DryRunResult,
    Recipient,
)
from announcer.core.broadcast.errors import (
    BroadcastError,
    CapacityError,
    ChannelSendError,
    ValidationError,
)
from announcer.core.broadcast.service import broadcast_announcement

__all__ = [
    "BroadcastTotals",
    "Channel",
    "DryRunResult",
    "Recipient",
    "BroadcastError",
    "CapacityError",
    "ChannelSendError",
    "ValidationError",
    "broadcast_announcement",
]
