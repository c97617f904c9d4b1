# announcer/infra/channel_senders.py
"""
Channel senders for broadcast announcements.

One sender per channel:
- Email - SendGrid
- SMS - Twilio

Provider SDK calls are not wired in: without credentials a send is
reported as queued, with credentials as sent. Either way the caller gets a
provider message id back. Missing contact details raise
``ChannelSendError`` with a classified reason.

Usage:
    senders = build_default_senders()
    message_id = await senders[Channel.EMAIL].send(recipient, "Pool closed Friday")
"""
from __future__ import annotations

import abc
import uuid
from typing import Dict

from announcer.config import Settings, settings
from announcer.core.broadcast.domain import Channel, Recipient
from announcer.core.broadcast.errors import ChannelSendError
from announcer.infra.logging_config import get_logger, mask_email, mask_phone

logger = get_logger(__name__)


def _message_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4()}"


class BaseChannelSender(abc.ABC):
    """Abstract base class for channel senders"""

    @property
    @abc.abstractmethod
    def channel(self) -> Channel:
        """Channel served by this sender"""
        pass

    @abc.abstractmethod
    def is_configured(self) -> bool:
        """Check if provider credentials are present"""
        pass

    @abc.abstractmethod
    async def send(self, recipient: Recipient, message: str) -> str:
        """
        Deliver ``message`` to one recipient.

        Returns:
            Provider message id

        Raises:
            ChannelSendError: with a classified reason
        """
        pass


class EmailSender(BaseChannelSender):
    """Email via SendGrid."""

    def __init__(self, api_key: str | None = None, subject: str | None = None) -> None:
        self._api_key = api_key if api_key is not None else settings.sendgrid_api_key
        self._subject = subject or settings.email_subject

    @property
    def channel(self) -> Channel:
        return Channel.EMAIL

    @property
    def subject(self) -> str:
        return self._subject

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def send(self, recipient: Recipient, message: str) -> str:
        if not recipient.email:
            raise ChannelSendError("MISSING_EMAIL")
        if "@" not in recipient.email:
            raise ChannelSendError("INVALID_EMAIL")

        message_id = _message_id("sendgrid")
        status = "sent" if self.is_configured() else "queued"
        logger.info(
            "Email %s: to=%s, subject=%s, id=%s",
            status, mask_email(recipient.email), self._subject, message_id,
        )
        return message_id


class SmsSender(BaseChannelSender):
    """SMS via Twilio."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
    ) -> None:
        self._account_sid = account_sid if account_sid is not None else settings.twilio_account_sid
        self._auth_token = auth_token if auth_token is not None else settings.twilio_auth_token
        self._from_number = from_number or settings.twilio_from_number

    @property
    def channel(self) -> Channel:
        return Channel.SMS

    def is_configured(self) -> bool:
        return bool(self._account_sid and self._auth_token)

    async def send(self, recipient: Recipient, message: str) -> str:
        if not recipient.phone:
            raise ChannelSendError("MISSING_PHONE")

        message_id = _message_id("twilio")
        status = "sent" if self.is_configured() else "queued"
        logger.info(
            "SMS %s: to=%s, chars=%d, id=%s",
            status, mask_phone(recipient.phone), len(message), message_id,
        )
        return message_id


def build_default_senders(config: Settings | None = None) -> Dict[Channel, BaseChannelSender]:
    """Senders for every channel, configured from settings"""
    cfg = config or settings
    return {
        Channel.EMAIL: EmailSender(api_key=cfg.sendgrid_api_key, subject=cfg.email_subject),
        Channel.SMS: SmsSender(
            account_sid=cfg.twilio_account_sid,
            auth_token=cfg.twilio_auth_token,
            from_number=cfg.twilio_from_number,
        ),
    }
