from __future__ import annotations


class OrderAssistError(Exception):
    """Base error for the order assistant."""


class RetrievalError(OrderAssistError):
    """Reading reference data for a turn failed."""


class GenerationError(OrderAssistError):
    """The language model completion failed."""


class PersistenceError(OrderAssistError):
    """Appending to or querying the spreadsheet store failed."""


class MalformedRowError(PersistenceError):
    """A spreadsheet row could not be decoded into its typed form."""

    def __init__(self, table: str, row: list, reason: str) -> None:
        super().__init__(f"{table}: {reason} (row={row!r})")
        self.table = table
        self.row = row
        self.reason = reason


class PayloadValidationError(OrderAssistError):
    """A request body did not match the operation schema."""


class TransportError(OrderAssistError):
    """An outbound notification could not be delivered."""
