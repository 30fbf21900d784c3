"""Typed views over the positional spreadsheet rows.

Column order is fixed by the sheet layout, there is no header-based access:

- Customers: ``[id, name, phone, email]``
- ORDER:     ``[date, customerName, email, service, package, description, deadline, status]``
- LAYANAN:   ``[name, basePrice, discountPct, customizable]``
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from orderassist.core.errors import MalformedRowError

CUSTOMERS_SHEET = "Customers"
ORDERS_SHEET = "ORDER"
SERVICES_SHEET = "LAYANAN"

DEFAULT_PACKAGE = "Paket Standar"
DEFAULT_ORDER_STATUS = "Menunggu Pembayaran"


def _cell(row: list[Any], index: int) -> str:
    # The Sheets API drops trailing empty cells
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def _parse_number(raw: str) -> float | None:
    try:
        value = float(raw.strip())
    except (ValueError, AttributeError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


@dataclass
class CustomerRow:
    id: str
    name: str
    phone: str
    email: str

    @classmethod
    def from_row(cls, row: list[Any]) -> "CustomerRow":
        return cls(id=_cell(row, 0), name=_cell(row, 1), phone=_cell(row, 2), email=_cell(row, 3))

    def to_row(self) -> list[str]:
        return [self.id, self.name, self.phone, self.email]

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "phone": self.phone, "email": self.email}


@dataclass
class OrderRow:
    date: str
    customer_name: str
    email: str
    service: str
    package: str | None = None
    description: str | None = None
    deadline: str | None = None
    status: str | None = None

    @classmethod
    def from_row(cls, row: list[Any]) -> "OrderRow":
        return cls(*(_cell(row, idx) for idx in range(8)))

    def to_row(self) -> list[str]:
        return [
            self.date,
            self.customer_name,
            self.email,
            self.service,
            self.package or DEFAULT_PACKAGE,
            self.description or "",
            self.deadline or "",
            self.status or DEFAULT_ORDER_STATUS,
        ]


@dataclass
class CatalogService:
    name: str
    base_price: float
    discount_pct: float
    customizable: bool

    @classmethod
    def from_row(cls, row: list[Any]) -> "CatalogService":
        name = _cell(row, 0).strip()
        if not name:
            raise MalformedRowError(SERVICES_SHEET, row, "empty service name")

        base_price = _parse_number(_cell(row, 1))
        if base_price is None:
            raise MalformedRowError(SERVICES_SHEET, row, "base price is not a number")

        # A blank or non-numeric discount means no discount
        discount = _parse_number(_cell(row, 2)) or 0.0
        if not 0.0 <= discount <= 100.0:
            raise MalformedRowError(SERVICES_SHEET, row, "discount must be between 0 and 100")

        return cls(
            name=name,
            base_price=base_price,
            discount_pct=discount,
            customizable=_cell(row, 3) == "Yes",
        )

    @property
    def discount_amount(self) -> float:
        return self.base_price * self.discount_pct / 100

    @property
    def total_price(self) -> float:
        return self.base_price * (1 - self.discount_pct / 100)
