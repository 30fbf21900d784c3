from __future__ import annotations

import logging
import uuid
from threading import Lock

from orderassist.whatsapp.base import WhatsAppSendResult

logger = logging.getLogger(__name__)


class MockWhatsAppProvider:
    """Keeps outbound messages in memory instead of calling the Graph API."""

    name = "mock"

    def __init__(self) -> None:
        self.outbox: list[WhatsAppSendResult] = []
        self.texts: list[tuple[str, str]] = []
        self._lock = Lock()

    def send_text(self, *, to_phone: str, text: str) -> WhatsAppSendResult:
        result = WhatsAppSendResult(
            status="sent",
            to_phone=to_phone,
            provider_message_id=f"mock-{uuid.uuid4().hex[:10]}",
        )
        with self._lock:
            self.outbox.append(result)
            self.texts.append((to_phone, text))
        logger.info("WhatsApp (mock) to=%s text=%s", to_phone, text)
        return result

    def messages_to(self, to_phone: str) -> list[str]:
        with self._lock:
            return [text for phone, text in self.texts if phone == to_phone]
