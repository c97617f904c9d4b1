# announcer/core/broadcast/dispatcher.py
"""
Batched fan-out of announcement sends.

Recipients are pulled from the directory into fixed-size batches. For each
batch, every (recipient, channel) pair the recipient has a contact for is
sent concurrently, and the driver waits for the whole batch to settle
before folding the outcomes and pulling again. At most
``batch_size * len(channels)`` sends are in flight at any time.

The ceiling is a "stop pulling" signal checked after each batch, so the
final ``targets`` may exceed it by up to ``batch_size - 1``.
"""
from __future__ import annotations

import asyncio
from typing import Any, AsyncIterable, Mapping, Sequence

from announcer.core.broadcast.aggregator import fold_batch_outcomes
from announcer.core.broadcast.domain import (
    BroadcastTotals,
    Channel,
    Recipient,
    RecipientOutcome,
)
from announcer.core.broadcast.errors import ChannelSendError
from announcer.core.broadcast.governor import ceiling_reached, report_progress
from announcer.core.broadcast.ports import ChannelSender
from announcer.infra.logging_config import get_logger, mask_email, mask_phone
from announcer.infra.metrics import BroadcastMetrics

logger = get_logger(__name__)

BATCH_SIZE = 15
PROGRESS_INTERVAL = 100
UNKNOWN_ERROR = "UNKNOWN_ERROR"
TIMEOUT_ERROR = "TIMEOUT"


def failure_reason(exc: BaseException) -> str:
    """Classified reason for a failed send; senders put it in the message."""
    if isinstance(exc, ChannelSendError):
        return exc.reason or UNKNOWN_ERROR
    return str(exc) or UNKNOWN_ERROR


def _destination(recipient: Recipient, channel: Channel) -> str:
    if channel == Channel.EMAIL:
        return mask_email(recipient.email)
    return mask_phone(recipient.phone)


class BatchDispatcher:
    """
    Drives one live broadcast run.

    Usage:
        dispatcher = BatchDispatcher({Channel.EMAIL: email, Channel.SMS: sms})
        totals = await dispatcher.dispatch(message, [Channel.EMAIL], recipients, ceiling=1000)
    """

    def __init__(
        self,
        senders: Mapping[Channel, ChannelSender],
        *,
        batch_size: int = BATCH_SIZE,
        progress_interval: int = PROGRESS_INTERVAL,
        send_timeout: float | None = None,
        log: Any = None,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if progress_interval <= 0:
            raise ValueError("progress_interval must be positive")
        self._senders = dict(senders)
        self._batch_size = batch_size
        self._progress_interval = progress_interval
        self._send_timeout = send_timeout
        self._log = log or logger

    async def dispatch(
        self,
        message: str,
        channels: Sequence[Channel],
        recipients: AsyncIterable[Recipient],
        ceiling: int,
    ) -> BroadcastTotals:
        """Send ``message`` to every recipient until exhaustion or ``ceiling``."""
        missing = [c.value for c in channels if c not in self._senders]
        if missing:
            raise ValueError(f"No sender registered for channel(s): {', '.join(missing)}")

        channels = list(dict.fromkeys(channels))
        totals = BroadcastTotals()
        batch: list[Recipient] = []

        try:
            async for recipient in recipients:
                batch.append(recipient)
                if len(batch) < self._batch_size:
                    continue

                await self._process_batch(batch, message, channels, totals)
                batch = []

                if ceiling_reached(totals.targets, ceiling, self._log):
                    totals.limit_reached = True
                    break
            else:
                # Source exhausted: flush the trailing partial batch
                if batch:
                    await self._process_batch(batch, message, channels, totals)
                    totals.limit_reached = ceiling_reached(totals.targets, ceiling, self._log)
        finally:
            aclose = getattr(recipients, "aclose", None)
            if aclose is not None:
                await aclose()

        self._log.info(
            f"Broadcast complete: targets={totals.targets}, "
            f"email={totals.sent[Channel.EMAIL]}, sms={totals.sent[Channel.SMS]}, "
            f"failures={sum(totals.failed.values())}"
        )
        BroadcastMetrics.run_finished("live")
        return totals

    async def _process_batch(
        self,
        batch: list[Recipient],
        message: str,
        channels: list[Channel],
        totals: BroadcastTotals,
    ) -> None:
        """Launch the whole batch, wait for every task to settle, then fold."""
        with BroadcastMetrics.track_batch_time():
            outcomes = await asyncio.gather(
                *(self._send_to_recipient(r, message, channels) for r in batch),
                return_exceptions=True,
            )

        tally = fold_batch_outcomes(outcomes, totals.failed)
        totals.add(tally, len(batch))
        BroadcastMetrics.batch_processed(len(batch))

        report_progress(totals.targets, self._progress_interval, self._log)

    async def _send_to_recipient(
        self,
        recipient: Recipient,
        message: str,
        channels: list[Channel],
    ) -> RecipientOutcome:
        """Attempt each channel the recipient can receive; skip the rest silently."""
        usable = [c for c in channels if recipient.has_contact_for(c)]
        results = await asyncio.gather(
            *(self._attempt(channel, recipient, message) for channel in usable)
        )

        outcome = RecipientOutcome()
        for channel, error in results:
            if error is not None:
                outcome.errors.append(error)
            elif channel == Channel.EMAIL:
                outcome.email_sent = 1
            else:
                outcome.sms_sent = 1
        return outcome

    async def _attempt(
        self,
        channel: Channel,
        recipient: Recipient,
        message: str,
    ) -> tuple[Channel, str | None]:
        """Single send attempt. Returns (channel, failure reason or None); never raises."""
        sender = self._senders[channel]
        try:
            if self._send_timeout is None:
                await sender.send(recipient, message)
            else:
                await asyncio.wait_for(sender.send(recipient, message), self._send_timeout)
        except asyncio.TimeoutError:
            reason = TIMEOUT_ERROR
        except Exception as exc:
            reason = failure_reason(exc)
        else:
            BroadcastMetrics.send_succeeded(channel.value)
            return channel, None

        self._log.error(
            f"Failed to send {channel.value} to {_destination(recipient, channel)}: {reason}"
        )
        BroadcastMetrics.send_failed(channel.value, reason)
        return channel, reason
