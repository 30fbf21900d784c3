from __future__ import annotations

import copy
from threading import Lock
from typing import Any

from orderassist.sheets.rows import CUSTOMERS_SHEET, ORDERS_SHEET, SERVICES_SHEET

DEFAULT_SEED: dict[str, list[list[Any]]] = {
    "Profile": [["Nama", "Yeheskiel Yunus Tame"], ["Bidang", "Website, Chatbot, AI"]],
    SERVICES_SHEET: [
        ["Website", "1500000", "10", "Yes"],
        ["Chatbot", "1000000", "0", "Yes"],
        ["AI", "2500000", "5", "No"],
    ],
    "PORTOFOLIO": [],
    "TESTIMONI": [],
    "SKILLS": [],
    "SOSIAL MEDIA": [],
    "FAQ": [],
    ORDERS_SHEET: [],
    CUSTOMERS_SHEET: [],
}


class InMemorySheetsBackend:
    """Spreadsheet stand-in for local development and tests."""

    name = "mock"

    def __init__(self, tables: dict[str, list[list[Any]]] | None = None) -> None:
        self._tables: dict[str, list[list[Any]]] = copy.deepcopy(
            DEFAULT_SEED if tables is None else tables
        )
        self._lock = Lock()

    def get_values(self, sheet_name: str) -> list[list[Any]]:
        with self._lock:
            return copy.deepcopy(self._tables.get(sheet_name, []))

    def append_values(self, sheet_name: str, rows: list[list[Any]]) -> None:
        with self._lock:
            self._tables.setdefault(sheet_name, []).extend(copy.deepcopy(rows))
