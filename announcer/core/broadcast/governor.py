# announcer/core/broadcast/governor.py
"""Recipient ceiling and progress checks, consulted between batches."""
from __future__ import annotations

from typing import Any

LIVE_LIMIT_EVENT = "Reached max recipient limit for broadcast"
DRY_RUN_LIMIT_EVENT = "Hit max recipient limit during dry run"


def ceiling_reached(targets: int, ceiling: int, log: Any, event: str = LIVE_LIMIT_EVENT) -> bool:
    """True when no more recipients should be pulled. Logs ``event`` when so."""
    if targets < ceiling:
        return False
    log.info(event)
    return True


def progress_due(targets: int, interval: int) -> bool:
    return targets > 0 and targets % interval == 0


def report_progress(targets: int, interval: int, log: Any) -> bool:
    if not progress_due(targets, interval):
        return False
    log.info(f"Broadcast progress: {targets} members processed")
    return True
