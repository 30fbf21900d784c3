from __future__ import annotations

from orderassist.core.config import (
    GOOGLE_SERVICE_ACCOUNT_CREDENTIALS,
    GOOGLE_SHEET_ID,
    HTTP_TIMEOUT_SECONDS,
    SHEETS_PROVIDER,
)
from orderassist.sheets.base import SheetsBackend
from orderassist.sheets.gateway import SheetsGateway
from orderassist.sheets.google_provider import GoogleSheetsBackend
from orderassist.sheets.mock_provider import InMemorySheetsBackend


def get_backend(provider: str | None = None) -> SheetsBackend:
    provider = (provider or SHEETS_PROVIDER or "google").strip().lower()
    if provider == "mock":
        return InMemorySheetsBackend()
    return GoogleSheetsBackend(GOOGLE_SHEET_ID, GOOGLE_SERVICE_ACCOUNT_CREDENTIALS, timeout=HTTP_TIMEOUT_SECONDS)


def build_gateway(provider: str | None = None) -> SheetsGateway:
    return SheetsGateway(get_backend(provider))
