"""
Delivery
========
Senders that hand raw OTP codes to email and SMS providers.

Usage:
    from credgate.delivery import build_code_sender

    sender = build_code_sender(settings.delivery)
    result = await sender.send_phone_code("+14155552671", "123456")
"""

from credgate.config import DeliveryConfig

from .base import CodeSender, DeliveryResult, RoutingCodeSender, DEFAULT_MESSAGE
from .console import LogCodeSender
from .smtp import SmtpCodeSender
from .twilio import TwilioCodeSender


def build_code_sender(config: DeliveryConfig) -> CodeSender:
    """Wire configured providers; unconfigured channels log the code instead."""
    fallback = LogCodeSender()
    email_sender = SmtpCodeSender(config.smtp) if config.smtp else fallback
    phone_sender = TwilioCodeSender(config.twilio) if config.twilio else fallback
    return RoutingCodeSender(email_sender, phone_sender)


__all__ = [
    # Base
    "CodeSender",
    "DeliveryResult",
    "RoutingCodeSender",
    "DEFAULT_MESSAGE",
    # Senders
    "LogCodeSender",
    "SmtpCodeSender",
    "TwilioCodeSender",
    # Factory
    "build_code_sender",
]
