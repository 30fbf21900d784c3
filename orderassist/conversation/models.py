from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from orderassist.conversation.stages import OrderStage, parse_stage


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatTurn":
        return cls(role=str(data.get("role", "")), content=str(data.get("content", "")))


@dataclass(frozen=True)
class CustomerData:
    name: str
    email: str
    phone: str
    is_new: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email, "phone": self.phone, "isNew": self.is_new}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomerData":
        return cls(
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            phone=str(data.get("phone") or ""),
            is_new=bool(data.get("isNew", False)),
        )


@dataclass(frozen=True)
class OrderRecord:
    """The in-progress order of one session.

    Frozen: changes go through ``with_changes`` and are written back by the
    orchestrator, so no caller keeps a mutable copy between turns.
    """

    stage: OrderStage = OrderStage.NONE
    service: str | None = None
    custom_notes: str | None = None
    price: float | None = None
    customer_data: CustomerData | None = None
    payment_method: str | None = None

    def with_changes(self, **changes: Any) -> "OrderRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "service": self.service,
            "customNotes": self.custom_notes,
            "price": self.price,
            "customerData": self.customer_data.to_dict() if self.customer_data else None,
            "paymentMethod": self.payment_method,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "OrderRecord":
        if not data:
            return cls()
        customer = data.get("customerData")
        price = data.get("price")
        return cls(
            stage=parse_stage(data.get("stage")) or OrderStage.NONE,
            service=data.get("service"),
            custom_notes=data.get("customNotes"),
            price=float(price) if price is not None else None,
            customer_data=CustomerData.from_dict(customer) if isinstance(customer, dict) else None,
            payment_method=data.get("paymentMethod"),
        )
