from __future__ import annotations

import json
import logging
from threading import Lock
from typing import Any
from urllib.parse import quote

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from orderassist.core.errors import PersistenceError

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)


def load_service_account_credentials(raw: str) -> service_account.Credentials:
    """Parse the service-account JSON kept in ``GOOGLE_SERVICE_ACCOUNT_CREDENTIALS``."""
    try:
        info = json.loads(raw or "{}")
    except json.JSONDecodeError as exc:
        raise PersistenceError("Invalid service account credentials") from exc
    if not isinstance(info, dict):
        raise PersistenceError("Invalid service account credentials")
    try:
        return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
    except ValueError as exc:
        raise PersistenceError("Service account credentials are incomplete") from exc


class GoogleSheetsBackend:
    """Sheets v4 ``values`` API over a google-auth ``AuthorizedSession``.

    The session is created on first use so the service can boot without
    credentials when another backend is selected.
    """

    name = "google"

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_json: str = "{}",
        *,
        timeout: float = 20.0,
        session: AuthorizedSession | None = None,
    ) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._credentials_json = credentials_json
        self._timeout = timeout
        self._session = session
        self._lock = Lock()

    @property
    def session(self) -> AuthorizedSession:
        with self._lock:
            if self._session is None:
                self._session = AuthorizedSession(load_service_account_credentials(self._credentials_json))
            return self._session

    def _url(self, sheet_name: str, suffix: str = "") -> str:
        if not self._spreadsheet_id:
            raise PersistenceError("GOOGLE_SHEET_ID is not configured")
        return f"{SHEETS_API_URL}/{self._spreadsheet_id}/values/{quote(sheet_name, safe='')}{suffix}"

    def get_values(self, sheet_name: str) -> list[list[Any]]:
        url = self._url(sheet_name)
        try:
            response = self.session.get(url, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except (GoogleAuthError, requests.RequestException, ValueError) as exc:
            logger.error("Error getting data from %s: %s", sheet_name, exc)
            raise PersistenceError(f"Failed to get data from {sheet_name}") from exc
        return data.get("values") or []

    def append_values(self, sheet_name: str, rows: list[list[Any]]) -> None:
        url = self._url(sheet_name, ":append")
        try:
            response = self.session.post(
                url,
                params={"valueInputOption": "RAW"},
                json={"values": rows},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except (GoogleAuthError, requests.RequestException) as exc:
            logger.error("Error appending to %s: %s", sheet_name, exc)
            raise PersistenceError(f"Failed to append to {sheet_name}") from exc
