from __future__ import annotations

import logging

from orderassist.core.config import (
    HTTP_TIMEOUT_SECONDS,
    WHATSAPP_ACCESS_TOKEN,
    WHATSAPP_API_VERSION,
    WHATSAPP_PHONE_NUMBER_ID,
    WHATSAPP_PROVIDER,
)
from orderassist.core.errors import TransportError
from orderassist.whatsapp.base import WhatsAppProvider, WhatsAppSendResult
from orderassist.whatsapp.cloud_provider import CloudWhatsAppProvider
from orderassist.whatsapp.mock_provider import MockWhatsAppProvider

logger = logging.getLogger(__name__)


def get_provider(provider: str | None = None) -> WhatsAppProvider:
    provider = (provider or WHATSAPP_PROVIDER or "cloud").strip().lower()
    if provider == "mock":
        return MockWhatsAppProvider()
    return CloudWhatsAppProvider(
        access_token=WHATSAPP_ACCESS_TOKEN,
        phone_number_id=WHATSAPP_PHONE_NUMBER_ID,
        api_version=WHATSAPP_API_VERSION,
        timeout=HTTP_TIMEOUT_SECONDS,
    )


class WhatsAppNotifier:
    """Best-effort delivery: failures are logged, never raised, never retried."""

    def __init__(self, provider: WhatsAppProvider) -> None:
        self.provider = provider

    def send_text(self, to_phone: str, text: str) -> WhatsAppSendResult | None:
        if not to_phone:
            logger.warning("WhatsApp skipped: no recipient address")
            return None
        try:
            return self.provider.send_text(to_phone=to_phone, text=text)
        except TransportError as exc:
            logger.error(
                "Error sending WhatsApp message to=%s: %s", to_phone, exc, extra={"provider": self.provider.name}
            )
            return None
