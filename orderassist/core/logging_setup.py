from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from orderassist.core.config import LOG_LEVEL
from orderassist.core.request_context import get_request_id, get_session_id

# Credentials that can leak through exception text: bearer headers, OAuth
# tokens, the service-account key and the webhook verify token.
_REDACTIONS = (
    re.compile(r"(bearer\s+)([A-Za-z0-9._\-]+)", re.IGNORECASE),
    re.compile(r"((?:access_|verify_)?token[\"']?\s*[:=]\s*[\"']?)([^\s\"',}&]+)", re.IGNORECASE),
    re.compile(r"(-----BEGIN [A-Z ]*PRIVATE KEY-----)(.*?)(?=-----END|$)", re.DOTALL),
    re.compile(r"(private_key[\"']?\s*[:=]\s*[\"']?)([^\s\"',}]+)", re.IGNORECASE),
    re.compile(r"(api[_-]?key[\"']?\s*[:=]\s*[\"']?)([^\s\"',}]+)", re.IGNORECASE),
)

# LogRecord extras copied into the JSON line when present.
_EXTRA_FIELDS = ("endpoint", "method", "status_code", "stage", "previous_stage", "signalled", "provider")


def redact(text: str) -> str:
    for pattern in _REDACTIONS:
        text = pattern.sub(r"\1***", text)
    return text


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None) or get_request_id(),
            "session_id": getattr(record, "session_id", None) or get_session_id(),
            "message": redact(record.getMessage()),
        }
        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            entry["duration_ms"] = duration_ms
        entry.update(
            {name: getattr(record, name) for name in _EXTRA_FIELDS if getattr(record, name, None) is not None}
        )
        if record.exc_info:
            entry["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str = LOG_LEVEL) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    # httpx logs every request line at INFO, which includes the Graph API path.
    logging.getLogger("httpx").setLevel(logging.WARNING)
