# tests/conftest.py
"""Pytest configuration and fixtures"""
import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from announcer.config import Settings  # noqa: E402
from announcer.core.broadcast.domain import Channel, Recipient  # noqa: E402


_UNSET = object()


class CountingSource:
    """Recipient source that records how often it was touched."""

    def __init__(self, members, *, count=_UNSET):
        self.members = list(members)
        self.count = len(self.members) if count is _UNSET else count
        self.list_calls = 0
        self.count_calls = 0
        self.pulled = 0
        self.closed = False

    async def list_recipients(self, segment):
        self.list_calls += 1
        try:
            for member in self.members:
                self.pulled += 1
                yield member
        finally:
            self.closed = True

    async def count_recipients(self, segment):
        self.count_calls += 1
        return self.count


async def stream(members):
    """Async generator over a plain list"""
    for member in members:
        yield member


def email_members(count: int) -> list[Recipient]:
    return [Recipient(email=f"user{i}@example.com") for i in range(count)]


@pytest.fixture
def make_source():
    return CountingSource


@pytest.fixture
def senders():
    """AsyncMock sender per channel, succeeding by default"""
    return {
        Channel.EMAIL: AsyncMock(**{"send.return_value": "email-123"}),
        Channel.SMS: AsyncMock(**{"send.return_value": "sms-456"}),
    }


@pytest.fixture
def pipeline_settings():
    """Settings isolated from any local .env"""
    return Settings(_env_file=None)


@pytest.fixture
def correlation_id():
    return "req-test-0001"
