"""
Twilio SMS Sender
=================
Delivers phone codes through the Twilio Messages API.
"""

from typing import Optional

import httpx
import structlog

from credgate.config import TwilioConfig
from credgate.logging import mask_phone

from .base import CodeSender, DeliveryResult, DEFAULT_MESSAGE

logger = structlog.get_logger(__name__)


class TwilioCodeSender(CodeSender):
    """
    Twilio SMS sender.

    Uses a messaging service when one is configured, otherwise the
    configured ``from_number``.
    """

    name = "twilio"

    def __init__(
        self,
        config: TwilioConfig,
        message_template: str = DEFAULT_MESSAGE,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            config: Account SID, auth token and sender
            message_template: SMS body, ``{code}`` is substituted
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        super().__init__(message_template)
        self.config = config
        self.base_url = f"https://api.twilio.com/2010-04-01/Accounts/{config.account_sid}"
        self._client = client or httpx.AsyncClient(
            auth=(config.account_sid, config.auth_token),
            timeout=config.timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def send_phone_code(self, phone: str, code: str) -> DeliveryResult:
        payload = {"To": phone, "Body": self.render(code)}
        if self.config.messaging_service_sid:
            payload["MessagingServiceSid"] = self.config.messaging_service_sid
        else:
            payload["From"] = self.config.from_number

        try:
            response = await self._client.post(f"{self.base_url}/Messages.json", data=payload)
        except httpx.HTTPError as e:
            logger.error("Twilio send failed", to=mask_phone(phone), error=str(e))
            return DeliveryResult(
                success=False,
                provider=self.name,
                error_code="TRANSPORT_ERROR",
                error_message=type(e).__name__,
            )

        if response.status_code == 201:
            data = response.json()
            logger.info("Twilio SMS accepted", to=mask_phone(phone), sid=data.get("sid"))
            return DeliveryResult(
                success=True,
                provider=self.name,
                provider_message_id=data.get("sid"),
                raw_response={"sid": data.get("sid"), "status": data.get("status")},
            )

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        logger.error(
            "Twilio rejected SMS",
            to=mask_phone(phone),
            status_code=response.status_code,
            error_code=error_data.get("code"),
        )
        return DeliveryResult(
            success=False,
            provider=self.name,
            error_code=str(error_data.get("code", response.status_code)),
            error_message=error_data.get("message", "Unknown error"),
            raw_response=error_data,
        )
