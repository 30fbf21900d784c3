from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from orderassist.core.errors import PayloadValidationError, PersistenceError
from orderassist.deps import get_gateway
from orderassist.sheets.gateway import SheetsGateway
from orderassist.sheets.rows import CustomerRow, OrderRow

router = APIRouter(prefix="/api", tags=["sheets"])
logger = logging.getLogger(__name__)


class SheetsRequest(BaseModel):
    operation: str
    data: Any = None


class GetDataPayload(BaseModel):
    sheet_name: str = Field(..., alias="sheetName")


class UpdateOrderPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    customer_name: str = Field(..., alias="customerName")
    email: str
    service: str
    package: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[str] = None
    status: Optional[str] = None

    def to_row(self) -> OrderRow:
        return OrderRow(
            date=self.date,
            customer_name=self.customer_name,
            email=self.email,
            service=self.service,
            package=self.package,
            description=self.description,
            deadline=self.deadline,
            status=self.status,
        )


class UpdateCustomerPayload(BaseModel):
    customer_id: str = Field(..., alias="customerId")
    name: str
    phone: str
    email: str


class GetCustomerPayload(BaseModel):
    phone: str


def _get_data(gateway: SheetsGateway, data: Any) -> dict[str, Any]:
    payload = GetDataPayload.model_validate(data)
    return {"data": gateway.get_sheet_data(payload.sheet_name)}


def _update_order(gateway: SheetsGateway, data: Any) -> dict[str, Any]:
    payload = UpdateOrderPayload.model_validate(data)
    gateway.update_order(payload.to_row())
    return {"success": True}


def _update_customer(gateway: SheetsGateway, data: Any) -> dict[str, Any]:
    payload = UpdateCustomerPayload.model_validate(data)
    created, customer_id = gateway.update_customer(
        CustomerRow(id=payload.customer_id, name=payload.name, phone=payload.phone, email=payload.email)
    )
    if not created:
        return {"success": True, "message": "Customer already exists", "customerId": customer_id}
    return {"success": True, "customerId": customer_id}


def _get_customer(gateway: SheetsGateway, data: Any) -> dict[str, Any]:
    payload = GetCustomerPayload.model_validate(data)
    customer = gateway.get_customer(payload.phone)
    if customer is None:
        return {"exists": False}
    return {"exists": True, "customer": customer.to_dict()}


OPERATIONS = {
    "getData": _get_data,
    "updateOrder": _update_order,
    "updateCustomer": _update_customer,
    "getCustomer": _get_customer,
}


def _dispatch(gateway: SheetsGateway, body: Any) -> dict[str, Any]:
    try:
        envelope = SheetsRequest.model_validate(body)
    except ValidationError as exc:
        raise PayloadValidationError("Request body must be an object with a string operation") from exc
    handler = OPERATIONS.get(envelope.operation)
    if handler is None:
        raise PayloadValidationError("Invalid operation")
    try:
        return handler(gateway, envelope.data)
    except ValidationError as exc:
        raise PayloadValidationError("Invalid data") from exc


@router.post("/sheets")
async def sheets_operation(request: Request, gateway: SheetsGateway = Depends(get_gateway)):
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        return await run_in_threadpool(_dispatch, gateway, body)
    except PayloadValidationError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except PersistenceError:
        logger.exception("Sheets API error operation=%s", body.get("operation"))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


@router.get("/sheets")
def sheets_get():
    return JSONResponse(status_code=405, content={"error": "Use POST method for Sheets API operations"})
