"""
Development Sender
==================
Logs codes instead of sending them. Used when no provider is configured.
"""

import structlog

from credgate.logging import mask_email, mask_phone

from .base import CodeSender, DeliveryResult

logger = structlog.get_logger(__name__)


class LogCodeSender(CodeSender):
    """
    Writes the code to the log at WARNING level.

    For local development only: anyone who can read the logs can read the codes.
    """

    name = "log"

    async def send_email_code(self, email: str, code: str) -> DeliveryResult:
        logger.warning("[DEV] Email OTP", to=mask_email(email), code=code)
        return DeliveryResult(success=True, provider=self.name)

    async def send_phone_code(self, phone: str, code: str) -> DeliveryResult:
        logger.warning("[DEV] Phone OTP", to=mask_phone(phone), code=code)
        return DeliveryResult(success=True, provider=self.name)
