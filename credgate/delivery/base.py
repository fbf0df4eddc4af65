"""
Code Delivery
=============
Base classes for delivering OTP codes by email and SMS.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MESSAGE = "Your verification code is {code}. Do not share it with anyone."


@dataclass
class DeliveryResult:
    """Result of a delivery attempt. Never contains the code."""
    success: bool
    provider: str
    provider_message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None


class CodeSender(ABC):
    """
    Delivers raw codes to an email address or phone number.

    Senders report failure through ``DeliveryResult(success=False)``; an
    exception raised from a sender is treated the same way by the engine.
    Channels a provider does not handle report failure.
    """

    name: str = "base"

    def __init__(self, message_template: str = DEFAULT_MESSAGE):
        self.message_template = message_template

    def render(self, code: str) -> str:
        return self.message_template.format(code=code)

    async def send_email_code(self, email: str, code: str) -> DeliveryResult:
        return self._unsupported("email")

    async def send_phone_code(self, phone: str, code: str) -> DeliveryResult:
        return self._unsupported("phone")

    async def close(self) -> None:
        """Release provider resources (HTTP clients, connections)."""

    def _unsupported(self, channel: str) -> DeliveryResult:
        logger.error("Channel not supported by sender", provider=self.name, channel=channel)
        return DeliveryResult(
            success=False,
            provider=self.name,
            error_code="CHANNEL_UNSUPPORTED",
            error_message=f"{self.name} cannot deliver to {channel}",
        )


class RoutingCodeSender(CodeSender):
    """Sends email codes through one sender and phone codes through another."""

    name = "routing"

    def __init__(self, email_sender: CodeSender, phone_sender: CodeSender):
        super().__init__()
        self.email_sender = email_sender
        self.phone_sender = phone_sender

    async def send_email_code(self, email: str, code: str) -> DeliveryResult:
        return await self.email_sender.send_email_code(email, code)

    async def send_phone_code(self, phone: str, code: str) -> DeliveryResult:
        return await self.phone_sender.send_phone_code(phone, code)

    async def close(self) -> None:
        await self.email_sender.close()
        if self.phone_sender is not self.email_sender:
            await self.phone_sender.close()
