# announcer/infra/member_directory.py
"""
Member directory used as the broadcast recipient source.

The real directory service is not integrated; ``InMemoryMemberDirectory``
serves fixed member lists per segment and is what tests, the CLI and local
development run against.
"""
from __future__ import annotations

from typing import AsyncIterator, Iterable, Mapping

from announcer.core.broadcast.domain import Recipient
from announcer.infra.logging_config import get_logger

logger = get_logger(__name__)

ALL_SEGMENT = "all"

_DEMO_MEMBERS = (
    Recipient(email="user1@example.com", phone="+1234567890", member_id="m-0001"),
    Recipient(email="user2@example.com", phone="+1234567891", member_id="m-0002"),
    Recipient(email="user3@example.com", member_id="m-0003"),
    Recipient(phone="+1234567892", member_id="m-0004"),
)


class InMemoryMemberDirectory:
    """
    Segment → members lookup.

    Every ``list_recipients`` call returns a new async generator, so the
    same directory can back several runs. Unknown segments fall back to
    the ``"all"`` segment when ``fallback_to_all`` is set, else yield nothing.
    """

    def __init__(
        self,
        members_by_segment: Mapping[str, Iterable[Recipient]] | None = None,
        *,
        fallback_to_all: bool = False,
    ):
        self._segments: dict[str, tuple[Recipient, ...]] = {
            segment: tuple(members)
            for segment, members in (members_by_segment or {}).items()
        }
        self._fallback_to_all = fallback_to_all

    @classmethod
    def default(cls) -> "InMemoryMemberDirectory":
        return cls({ALL_SEGMENT: _DEMO_MEMBERS}, fallback_to_all=True)

    def _members(self, segment: str) -> tuple[Recipient, ...]:
        if segment in self._segments:
            return self._segments[segment]
        if self._fallback_to_all:
            return self._segments.get(ALL_SEGMENT, ())
        return ()

    async def list_recipients(self, segment: str) -> AsyncIterator[Recipient]:
        logger.info(f"Fetching members from segment: {segment}")
        for member in self._members(segment):
            yield member

    async def count_recipients(self, segment: str) -> int | None:
        return len(self._members(segment))
