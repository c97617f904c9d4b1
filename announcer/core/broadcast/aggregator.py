# announcer/core/broadcast/aggregator.py
from __future__ import annotations

from typing import Sequence, Union

from announcer.core.broadcast.domain import BatchTally, RecipientOutcome

SettledOutcome = Union[RecipientOutcome, BaseException]


def fold_batch_outcomes(
    outcomes: Sequence[SettledOutcome],
    failure_histogram: dict[str, int],
) -> BatchTally:
    """
    Reduce one batch of settled per-recipient outcomes.

    ``outcomes`` is what ``asyncio.gather(..., return_exceptions=True)``
    returns: outcome objects for tasks that ran to completion, exception
    instances for tasks that did not (crashed or cancelled). The latter
    contribute nothing.

    ``failure_histogram`` is updated in place and carries over between
    batches of the same run.
    """
    tally = BatchTally()

    for outcome in outcomes:
        if not isinstance(outcome, RecipientOutcome):
            continue

        tally.email_sent += outcome.email_sent
        tally.sms_sent += outcome.sms_sent

        for reason in outcome.errors:
            failure_histogram[reason] = failure_histogram.get(reason, 0) + 1

    return tally
