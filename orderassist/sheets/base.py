from __future__ import annotations

from typing import Any, Protocol


class SheetsBackend(Protocol):
    name: str

    def get_values(self, sheet_name: str) -> list[list[Any]]:
        """Return every row of ``sheet_name``; raises PersistenceError."""
        ...

    def append_values(self, sheet_name: str, rows: list[list[Any]]) -> None:
        """Append ``rows`` after the last row of ``sheet_name``; raises PersistenceError."""
        ...
