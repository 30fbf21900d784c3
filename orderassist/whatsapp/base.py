from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class InboundMessage:
    message_id: str
    from_number: str
    text: str
    message_type: str = "text"
    phone_number_id: str | None = None
    contact_name: str | None = None

    @property
    def is_text(self) -> bool:
        return self.message_type == "text"


@dataclass
class WhatsAppSendResult:
    status: str
    to_phone: str
    provider_message_id: str | None = None


class WhatsAppProvider(Protocol):
    name: str

    def send_text(self, *, to_phone: str, text: str) -> WhatsAppSendResult:
        """Deliver ``text``; raises TransportError when delivery fails."""
        ...


class Notifier(Protocol):
    def send_text(self, to_phone: str, text: str) -> WhatsAppSendResult | None:
        ...


SECRET_FIELDS = frozenset({"access_token", "verify_token", "authorization", "token", "private_key"})


def sanitize_payload(value: Any, *, field: str | None = None) -> Any:
    """Copy of ``value`` with secret fields masked down to their last four characters."""
    if field is not None and field.lower() in SECRET_FIELDS and value is not None:
        secret = str(value)
        return "****" if len(secret) <= 4 else "****" + secret[-4:]
    if isinstance(value, dict):
        return {key: sanitize_payload(inner, field=key) for key, inner in value.items()}
    if isinstance(value, list):
        return [sanitize_payload(item) for item in value]
    return value


def safe_json(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError):
        return "{}"
