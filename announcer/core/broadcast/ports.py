# announcer/core/broadcast/ports.py
from __future__ import annotations
from typing import AsyncIterator, Optional, Protocol
from announcer.core.broadcast.domain import Recipient


class RecipientSource(Protocol):
    def list_recipients(self, segment: str) -> AsyncIterator[Recipient]:
        """
        Fresh, lazy stream of recipients for a segment.

        Each call starts over; the pipeline only iterates forward.
        """
        ...

    async def count_recipients(self, segment: str) -> Optional[int]:
        """
        Audience size if the directory can tell cheaply, else None
        """
        ...


class ChannelSender(Protocol):
    async def send(self, recipient: Recipient, message: str) -> str:
        """
        Deliver one message. Returns the provider message id;
        raises with the failure reason as message on any problem.
        """
        ...
