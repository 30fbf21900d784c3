from __future__ import annotations

import logging
from typing import Any

import httpx

from orderassist.core.errors import TransportError
from orderassist.whatsapp.base import InboundMessage, WhatsAppSendResult, safe_json, sanitize_payload

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _inbound_message(value: dict[str, Any], raw: Any) -> InboundMessage | None:
    raw = _as_dict(raw)
    message_id, from_number = raw.get("id"), raw.get("from")
    if not isinstance(message_id, str) or not isinstance(from_number, str) or not message_id or not from_number:
        return None
    message_type = raw.get("type") or "text"
    body = _as_dict(raw.get("text")).get("body") if message_type == "text" else None
    return InboundMessage(
        message_id=message_id,
        from_number=from_number,
        text=body.strip() if isinstance(body, str) else "",
        message_type=message_type,
        phone_number_id=_as_dict(value.get("metadata")).get("phone_number_id"),
        contact_name=_as_dict(_as_dict(_first(value.get("contacts"))).get("profile")).get("name") or None,
    )


def extract_first_text_message(payload: Any) -> InboundMessage | None:
    """Only ``entry[0].changes[0].value.messages[0]`` is considered, and only if it is text.

    Any level of the payload with an unexpected shape yields ``None``.
    """
    change = _as_dict(_first(_as_dict(_first(_as_dict(payload).get("entry"))).get("changes")))
    value = _as_dict(change.get("value"))
    message = _inbound_message(value, _first(value.get("messages")))
    if message is None or not message.is_text:
        return None
    return message


class CloudWhatsAppProvider:
    """Sends text messages through the WhatsApp Cloud (Graph) API."""

    name = "cloud"

    def __init__(
        self,
        *,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v19.0",
        timeout: float = 20.0,
    ) -> None:
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.api_version = api_version
        self.timeout = timeout

    @property
    def messages_url(self) -> str:
        return f"{GRAPH_API_BASE}/{self.api_version}/{self.phone_number_id}/messages"

    def send_text(self, *, to_phone: str, text: str) -> WhatsAppSendResult:
        if not (self.access_token and self.phone_number_id):
            raise TransportError("WhatsApp Cloud credentials are incomplete")

        body = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to_phone,
            "type": "text",
            "text": {"body": text},
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.messages_url,
                    headers={"Authorization": f"Bearer {self.access_token}"},
                    json=body,
                )
        except httpx.HTTPError as exc:
            raise TransportError(f"WhatsApp request failed: {exc}") from exc

        if response.is_error:
            raise TransportError(f"WhatsApp error {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        sent = _as_dict(_first(_as_dict(data).get("messages")))
        logger.debug("WhatsApp sent payload=%s", safe_json(sanitize_payload(body)))
        return WhatsAppSendResult(
            status="sent",
            to_phone=to_phone,
            provider_message_id=sent.get("id"),
        )
