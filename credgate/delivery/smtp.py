"""
SMTP Email Sender
=================
Delivers email codes over SMTP.

smtplib is blocking, so each send runs in the default executor.
"""

import asyncio
import smtplib
from email.mime.text import MIMEText

import structlog

from credgate.config import SMTPConfig
from credgate.logging import mask_email

from .base import CodeSender, DeliveryResult, DEFAULT_MESSAGE

logger = structlog.get_logger(__name__)

DEFAULT_SUBJECT = "Your verification code"


class SmtpCodeSender(CodeSender):
    """Plain-text email sender using STARTTLS when ``use_tls`` is set."""

    name = "smtp"

    def __init__(
        self,
        config: SMTPConfig,
        message_template: str = DEFAULT_MESSAGE,
        subject: str = DEFAULT_SUBJECT,
    ):
        super().__init__(message_template)
        self.config = config
        self.subject = subject

    def _build_message(self, email: str, code: str) -> MIMEText:
        message = MIMEText(self.render(code), "plain", "utf-8")
        message["Subject"] = self.subject
        message["From"] = self.config.from_address
        message["To"] = email
        return message

    def _send_sync(self, email: str, code: str) -> None:
        message = self._build_message(email, code)
        with smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout) as server:
            if self.config.use_tls:
                server.starttls()
            if self.config.username:
                server.login(self.config.username, self.config.password or "")
            server.sendmail(self.config.from_address, [email], message.as_string())

    async def send_email_code(self, email: str, code: str) -> DeliveryResult:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_sync, email, code)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send failed", to=mask_email(email), error=type(e).__name__)
            return DeliveryResult(
                success=False,
                provider=self.name,
                error_code="SMTP_ERROR",
                error_message=type(e).__name__,
            )

        logger.info("Email OTP sent", to=mask_email(email))
        return DeliveryResult(success=True, provider=self.name)
