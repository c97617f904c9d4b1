# announcer/core/broadcast/service.py
"""
Broadcast entry point.

Responsibilities:
    1. Validate the request (before the directory is touched)
    2. Reject live sends to audiences above the hard cap
    3. Run either the dry-run sampler or the batch dispatcher
    4. Return the final totals / preview

Callers see either one ``BroadcastError`` or a result, never both.
Per-send failures only show up in ``BroadcastTotals.failed``.
"""
from __future__ import annotations

from typing import Any, Mapping

from announcer.config import Settings, settings
from announcer.core.broadcast.dispatcher import BatchDispatcher
from announcer.core.broadcast.domain import BroadcastTotals, Channel, DryRunResult
from announcer.core.broadcast.dry_run import sample_recipients
from announcer.core.broadcast.errors import CapacityError
from announcer.core.broadcast.models import BroadcastRequest
from announcer.core.broadcast.ports import ChannelSender, RecipientSource
from announcer.core.broadcast.validation import validate_broadcast_input
from announcer.infra.logging_config import LogContext, get_logger

logger = get_logger(__name__)


async def _check_capacity(
    directory: RecipientSource,
    segment: str,
    cap: int,
    log: LogContext,
) -> None:
    count_recipients = getattr(directory, "count_recipients", None)
    if count_recipients is None:
        return

    size = await count_recipients(segment)
    if size is not None and size > cap:
        log.warning(f"Broadcast rejected: audience of {size} exceeds hard cap {cap}")
        raise CapacityError(
            f"audience of {size} exceeds hard cap of {cap}",
            targets=size, cap=cap,
        )


async def broadcast_announcement(
    request: BroadcastRequest | Mapping[str, Any],
    directory: RecipientSource,
    *,
    senders: Mapping[Channel, ChannelSender] | None = None,
    config: Settings | None = None,
) -> BroadcastTotals | DryRunResult:
    """
    Broadcast an announcement (or preview it with ``dry_run``).

    Args:
        request: ``BroadcastRequest`` or raw mapping with ``message``,
            ``channels``, ``audience`` and optional ``dryRun`` /
            ``correlationId``.
        directory: Recipient source for the audience segment.
        senders: Channel → sender. Defaults to the configured providers.
        config: Pipeline settings. Defaults to the global settings.

    Raises:
        ValidationError: malformed request; the directory is never queried.
        CapacityError: live send to an audience above the hard cap.
    """
    req = validate_broadcast_input(request)

    if config is None:
        config = settings

    segment = req.audience.segment
    log = LogContext(logger, correlation_id=req.correlation_id, segment=segment)

    if req.dry_run:
        log.info(f"Dry run started: channels={[c.value for c in req.channels]}")
        result = await sample_recipients(
            directory.list_recipients(segment),
            config.max_recipients,
            config.dry_run_sample_size,
            log=log,
        )
        result.correlation_id = req.correlation_id
        return result

    await _check_capacity(directory, segment, config.max_targets_hard_cap, log)

    if senders is None:
        from announcer.infra.channel_senders import build_default_senders
        senders = build_default_senders(config)

    log.info(
        f"Broadcast started: channels={[c.value for c in req.channels]}, "
        f"ceiling={config.max_recipients}, batch_size={config.batch_size}"
    )
    dispatcher = BatchDispatcher(
        senders,
        batch_size=config.batch_size,
        progress_interval=config.progress_interval,
        send_timeout=config.send_timeout_seconds,
        log=log,
    )
    totals = await dispatcher.dispatch(
        req.message,
        req.channels,
        directory.list_recipients(segment),
        config.max_recipients,
    )
    totals.correlation_id = req.correlation_id
    return totals
