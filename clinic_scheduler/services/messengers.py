"""Outbound message transports."""

import httpx
import structlog

from clinic_scheduler.config import Settings
from clinic_scheduler.repositories.base import OutboundMessenger

logger = structlog.get_logger(__name__)


class MessengerError(Exception):
    """Transport rejected a message."""


class LogMessenger:
    """Writes messages to the log instead of delivering them."""

    async def send(self, address: str, text: str) -> None:
        logger.info("outbound_message_logged", address=address, length=len(text))


class WhatsAppMessenger:
    """Sends text messages through the WhatsApp Cloud API."""

    def __init__(
        self,
        api_url: str,
        phone_number_id: str,
        access_token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize messenger with Cloud API credentials."""
        self.url = f"{api_url.rstrip('/')}/{phone_number_id}/messages"
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    async def send(self, address: str, text: str) -> None:
        """
        Send a text message.

        Args:
            address: Digits-only phone number with country code
            text: Message body

        Raises:
            MessengerError: If the API does not accept the message
        """
        payload = {
            "messaging_product": "whatsapp",
            "to": address,
            "type": "text",
            "text": {"body": text},
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.url,
                json=payload,
                headers={"Authorization": f"Bearer {self.access_token}"},
            )

        if response.status_code >= 400:
            logger.warning(
                "whatsapp_message_rejected",
                status_code=response.status_code,
                address=address,
            )
            raise MessengerError(f"WhatsApp API returned {response.status_code}")

        logger.info("whatsapp_message_sent", address=address)


def build_messenger(settings: Settings) -> OutboundMessenger:
    """WhatsApp messenger when credentials are configured, log messenger otherwise."""
    if settings.whatsapp_configured:
        return WhatsAppMessenger(
            api_url=settings.whatsapp_api_url,
            phone_number_id=settings.whatsapp_phone_number_id,
            access_token=settings.whatsapp_access_token,
            timeout=settings.dispatch_timeout_seconds,
        )
    return LogMessenger()
