# tests/test_broadcast_dry_run.py
"""Tests for the dry-run sampler."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from announcer.core.broadcast.domain import Recipient
from announcer.core.broadcast.dry_run import sample_recipients
from conftest import email_members, stream


class TestSampleRecipients:
    @pytest.mark.asyncio
    async def test_small_audience_sampled_fully(self):
        members = [
            Recipient(email="user1@example.com", phone="+1111111111"),
            Recipient(email="user2@example.com", phone="+2222222222"),
            Recipient(email="user3@example.com", phone="+3333333333"),
        ]

        result = await sample_recipients(stream(members), 1000, log=MagicMock())

        assert result.dry_run is True
        assert result.targets == 3
        assert result.sample == members

    @pytest.mark.asyncio
    async def test_sample_capped_at_ten(self):
        members = email_members(50)

        result = await sample_recipients(stream(members), 1000, log=MagicMock())

        assert result.targets == 50
        assert len(result.sample) == 10
        assert result.sample == members[:10]

    @pytest.mark.asyncio
    async def test_ceiling_stops_exactly(self, make_source):
        log = MagicMock()
        source = make_source(email_members(150))

        result = await sample_recipients(source.list_recipients("all"), 100, log=log)

        assert result.targets == 100
        assert result.limit_reached is True
        assert source.pulled == 100
        assert source.closed is True
        log.info.assert_any_call("Hit max recipient limit during dry run")

    @pytest.mark.asyncio
    async def test_custom_sample_size(self):
        result = await sample_recipients(stream(email_members(8)), 1000, sample_size=3, log=MagicMock())

        assert result.targets == 8
        assert len(result.sample) == 3

    @pytest.mark.asyncio
    async def test_sample_length_matches_min_of_targets_and_size(self):
        for count in (0, 1, 9, 10, 11):
            result = await sample_recipients(stream(email_members(count)), 1000, log=MagicMock())
            assert len(result.sample) == min(result.targets, 10)

    @pytest.mark.asyncio
    async def test_to_dict_shape(self):
        members = [Recipient(email="a@example.com", member_id="m-1"), Recipient(phone="+1555")]

        result = await sample_recipients(stream(members), 1000, log=MagicMock())

        assert result.to_dict() == {
            "dryRun": True,
            "targets": 2,
            "sample": [{"email": "a@example.com", "memberId": "m-1"}, {"phone": "+1555"}],
            "limitReached": False,
        }
