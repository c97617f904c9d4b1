# announcer/core/broadcast/dry_run.py
from __future__ import annotations

from typing import Any, AsyncIterable

from announcer.core.broadcast.domain import DryRunResult, Recipient
from announcer.core.broadcast.governor import DRY_RUN_LIMIT_EVENT, ceiling_reached
from announcer.infra.logging_config import get_logger
from announcer.infra.metrics import BroadcastMetrics

logger = get_logger(__name__)

SAMPLE_SIZE = 10


async def sample_recipients(
    recipients: AsyncIterable[Recipient],
    ceiling: int,
    sample_size: int = SAMPLE_SIZE,
    *,
    log: Any = None,
) -> DryRunResult:
    """
    Count the audience and keep the first ``sample_size`` recipients.

    Pulls one recipient at a time and stops as soon as ``ceiling`` is
    reached. No channel sender is involved.
    """
    log = log or logger
    result = DryRunResult()

    try:
        async for recipient in recipients:
            if len(result.sample) < sample_size:
                result.sample.append(recipient)
            result.targets += 1

            if ceiling_reached(result.targets, ceiling, log, event=DRY_RUN_LIMIT_EVENT):
                result.limit_reached = True
                break
    finally:
        aclose = getattr(recipients, "aclose", None)
        if aclose is not None:
            await aclose()

    log.info(f"Dry run complete: targets={result.targets}, sample={len(result.sample)}")
    BroadcastMetrics.run_finished("dry_run")
    return result
