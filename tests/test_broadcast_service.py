# tests/test_broadcast_service.py
"""
End-to-end tests for broadcast_announcement
(announcer/core/broadcast/service.py) with mocked senders and an
instrumented recipient source.
"""
from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from announcer.core.broadcast import (
    BroadcastTotals,
    CapacityError,
    Channel,
    DryRunResult,
    Recipient,
    ValidationError,
    broadcast_announcement,
)
from announcer.infra.member_directory import InMemoryMemberDirectory
from conftest import email_members


def _request(**overrides) -> dict:
    payload = {
        "message": "Test announcement",
        "channels": ["EMAIL"],
        "audience": {"segment": "all-members"},
    }
    payload.update(overrides)
    return payload


class TestDryRun:
    @pytest.mark.asyncio
    async def test_never_invokes_senders(self, senders, make_source, pipeline_settings):
        source = make_source(email_members(3))

        result = await broadcast_announcement(
            _request(dryRun=True, channels=["EMAIL", "SMS"]), source,
            senders=senders, config=pipeline_settings,
        )

        assert isinstance(result, DryRunResult)
        assert result.targets == 3
        assert len(result.sample) == 3
        senders[Channel.EMAIL].send.assert_not_called()
        senders[Channel.SMS].send.assert_not_called()

    @pytest.mark.asyncio
    async def test_dry_run_skips_capacity_check(self, senders, make_source, pipeline_settings):
        cfg = pipeline_settings.model_copy(update={"max_targets_hard_cap": 5, "max_recipients": 100})
        source = make_source(email_members(150))

        result = await broadcast_announcement(
            _request(dryRun=True), source, senders=senders, config=cfg,
        )

        assert result.targets == 100
        assert result.limit_reached is True
        assert source.count_calls == 0

    @pytest.mark.asyncio
    async def test_correlation_id_propagated(self, senders, make_source, pipeline_settings, correlation_id):
        result = await broadcast_announcement(
            _request(dryRun=True, correlationId=correlation_id), make_source(email_members(1)),
            senders=senders, config=pipeline_settings,
        )

        assert result.correlation_id == correlation_id
        assert result.to_dict()["requestId"] == correlation_id


class TestLiveBroadcast:
    @pytest.mark.asyncio
    async def test_returns_totals(self, senders, make_source, pipeline_settings):
        members = [
            Recipient(email="user1@example.com"),
            Recipient(phone="+2222222222"),
            Recipient(email="user3@example.com", phone="+3333333333"),
        ]

        totals = await broadcast_announcement(
            _request(channels=["EMAIL", "SMS"]), make_source(members),
            senders=senders, config=pipeline_settings,
        )

        assert isinstance(totals, BroadcastTotals)
        assert totals.targets == 3
        assert totals.sent == {Channel.EMAIL: 2, Channel.SMS: 2}
        assert totals.to_dict() == {
            "dryRun": False,
            "targets": 3,
            "sent": {"EMAIL": 2, "SMS": 2},
            "failed": {},
            "limitReached": False,
        }

    @pytest.mark.asyncio
    async def test_send_failure_reported_in_aggregate(self, senders, make_source, pipeline_settings):
        senders[Channel.EMAIL].send.side_effect = [
            Exception("RATE_LIMIT_EXCEEDED"), "email-ok", "email-ok",
        ]

        totals = await broadcast_announcement(
            _request(), make_source(email_members(3)),
            senders=senders, config=pipeline_settings,
        )

        assert totals.sent[Channel.EMAIL] == 2
        assert totals.failed["RATE_LIMIT_EXCEEDED"] == 1

    @pytest.mark.asyncio
    async def test_ceiling_from_config(self, senders, make_source, pipeline_settings, caplog):
        cfg = pipeline_settings.model_copy(update={"max_recipients": 50})
        caplog.set_level(logging.INFO, logger="announcer")

        totals = await broadcast_announcement(
            _request(), make_source(email_members(100)), senders=senders, config=cfg,
        )

        assert totals.targets == 60
        limit_logs = [r for r in caplog.records if r.getMessage() == "Reached max recipient limit for broadcast"]
        assert len(limit_logs) == 1
        assert limit_logs[0].segment == "all-members"

    @pytest.mark.asyncio
    async def test_send_timeout_from_config(self, senders, make_source, pipeline_settings):
        import asyncio

        async def hang(recipient, message):
            await asyncio.sleep(10)

        senders[Channel.EMAIL].send.side_effect = hang
        cfg = pipeline_settings.model_copy(update={"send_timeout_seconds": 0.01})

        totals = await broadcast_announcement(
            _request(), make_source(email_members(2)), senders=senders, config=cfg,
        )

        assert totals.failed == {"TIMEOUT": 2}

    @pytest.mark.asyncio
    async def test_default_senders_used_when_none_given(self, pipeline_settings):
        directory = InMemoryMemberDirectory.default()

        totals = await broadcast_announcement(
            _request(channels=["EMAIL", "SMS"], audience={"segment": "all"}),
            directory, config=pipeline_settings,
        )

        assert totals.targets == 4
        assert totals.sent == {Channel.EMAIL: 3, Channel.SMS: 3}
        assert totals.failed == {}


class TestRunLevelErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   "])
    async def test_blank_message_never_touches_source(self, message, senders, make_source, pipeline_settings):
        source = make_source(email_members(3))

        with pytest.raises(ValidationError, match="message cannot be empty"):
            await broadcast_announcement(
                _request(message=message), source, senders=senders, config=pipeline_settings,
            )

        assert source.list_calls == 0
        assert source.count_calls == 0
        assert source.pulled == 0

    @pytest.mark.asyncio
    async def test_capacity_error_before_any_send(self, senders, make_source, pipeline_settings):
        cfg = pipeline_settings.model_copy(update={"max_targets_hard_cap": 10})
        source = make_source(email_members(11))

        with pytest.raises(CapacityError) as exc_info:
            await broadcast_announcement(_request(), source, senders=senders, config=cfg)

        assert exc_info.value.status_code == 413
        assert exc_info.value.code == "TOO_MANY_TARGETS"
        assert exc_info.value.targets == 11
        assert source.pulled == 0
        senders[Channel.EMAIL].send.assert_not_called()

    @pytest.mark.asyncio
    async def test_source_without_count_skips_capacity_check(self, senders, pipeline_settings):
        cfg = pipeline_settings.model_copy(update={"max_targets_hard_cap": 1})

        class StreamOnlySource:
            async def list_recipients(self, segment):
                for member in email_members(3):
                    yield member

        totals = await broadcast_announcement(_request(), StreamOnlySource(), senders=senders, config=cfg)

        assert totals.targets == 3

    @pytest.mark.asyncio
    async def test_unknown_count_skips_capacity_check(self, senders, make_source, pipeline_settings):
        cfg = pipeline_settings.model_copy(update={"max_targets_hard_cap": 1})

        totals = await broadcast_announcement(
            _request(), make_source(email_members(3), count=None), senders=senders, config=cfg,
        )

        assert totals.targets == 3

    @pytest.mark.asyncio
    async def test_global_settings_used_by_default(self, senders, make_source, pipeline_settings):
        cfg = pipeline_settings.model_copy(update={"max_recipients": 15})

        with patch("announcer.core.broadcast.service.settings", cfg):
            totals = await broadcast_announcement(
                _request(), make_source(email_members(40)), senders=senders,
            )

        assert totals.targets == 15
