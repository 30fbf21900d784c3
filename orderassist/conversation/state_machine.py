"""Order stage detection.

``detect_order_flow`` reads the inbound message and the generated reply and
decides whether the session's order moves to the next stage. The keyword
rules are plain case-insensitive substring checks against free text, so a
reply that happens to contain "total" while pricing advances the flow just
like a real price quote would. A structured ``signal`` from the language
model, when present, takes precedence for the one step it names.
"""
from __future__ import annotations

import re
from typing import Iterable, Sequence

from orderassist.conversation.models import CustomerData, OrderRecord
from orderassist.conversation.stages import PAYMENT_METHODS, OrderStage, next_stage, parse_stage

ORDER_KEYWORDS = ("order", "pesan")
CONFIRMATION_REPLY = "ya"

_NAME_RE = re.compile(r"nama\s*:\s*(.+)", re.IGNORECASE)
_EMAIL_RE = re.compile(r"email\s*:\s*(\S+)", re.IGNORECASE)


def resolve_service(
    lower_message: str,
    service_names: Sequence[str],
    service_keywords: Iterable[str] = (),
) -> str | None:
    names = [name for name in service_names if name and name.strip()]
    for name in sorted(names, key=len, reverse=True):
        if name.lower() in lower_message:
            return name

    for keyword in service_keywords:
        if keyword and keyword in lower_message:
            exact = next((name for name in names if name.lower() == keyword), None)
            if exact:
                return exact
            partial = next((name for name in names if keyword in name.lower()), None)
            return partial or keyword
    return None


def parse_customer_details(message: str, phone_number: str) -> CustomerData | None:
    name_match = _NAME_RE.search(message)
    email_match = _EMAIL_RE.search(message)
    if not name_match or not email_match:
        return None
    name = name_match.group(1).splitlines()[0].strip()
    email = email_match.group(1).strip()
    if not name or not email:
        return None
    return CustomerData(name=name, email=email, phone=phone_number, is_new=True)


def _capture_details(message: str, record: OrderRecord, phone_number: str) -> OrderRecord:
    stage = record.stage
    lower_message = message.lower()

    if stage == OrderStage.CUSTOMIZATION and not record.custom_notes and message.strip():
        record = record.with_changes(custom_notes=message.strip())

    if stage in (OrderStage.CUSTOMER_DATA, OrderStage.PAYMENT_METHOD) and record.customer_data is None:
        customer = parse_customer_details(message, phone_number)
        if customer:
            record = record.with_changes(customer_data=customer)

    if stage in (OrderStage.PAYMENT_METHOD, OrderStage.FINAL_CONFIRMATION):
        method = next((option for option in PAYMENT_METHODS if option.lower() in lower_message), None)
        if method:
            record = record.with_changes(payment_method=method)

    return record


def _keyword_transition(
    lower_message: str,
    lower_response: str,
    record: OrderRecord,
    service_names: Sequence[str],
    service_keywords: Iterable[str],
) -> OrderRecord:
    stage = record.stage

    if stage == OrderStage.NONE:
        if any(keyword in lower_message for keyword in ORDER_KEYWORDS):
            return record.with_changes(stage=OrderStage.IDENTIFY_SERVICE)
        return record

    if stage == OrderStage.IDENTIFY_SERVICE and not record.service:
        service = resolve_service(lower_message, service_names, service_keywords)
        if service:
            return record.with_changes(service=service, stage=OrderStage.CUSTOMIZATION)
        return record

    if stage == OrderStage.CUSTOMIZATION and "custom" in lower_response:
        return record.with_changes(stage=OrderStage.PRICE_CALCULATION)

    if stage == OrderStage.PRICE_CALCULATION and "total" in lower_response:
        return record.with_changes(stage=OrderStage.CUSTOMER_DATA)

    if stage == OrderStage.CUSTOMER_DATA and ("nama" in lower_response or "email" in lower_response):
        return record.with_changes(stage=OrderStage.PAYMENT_METHOD)

    if stage == OrderStage.PAYMENT_METHOD and "pembayaran" in lower_response:
        return record.with_changes(stage=OrderStage.FINAL_CONFIRMATION)

    if stage == OrderStage.FINAL_CONFIRMATION and lower_message.strip() == CONFIRMATION_REPLY:
        return record.with_changes(stage=OrderStage.DATA_SAVING)

    if stage == OrderStage.DATA_SAVING and "berhasil" in lower_response:
        return record.with_changes(stage=OrderStage.FOLLOW_UP)

    return record


def _signal_transition(
    signal: str | None,
    lower_message: str,
    record: OrderRecord,
    service_names: Sequence[str],
    service_keywords: Iterable[str],
) -> OrderRecord | None:
    target = parse_stage(signal)
    if target is None or target != next_stage(record.stage):
        return None

    if target == OrderStage.CUSTOMIZATION:
        if record.service:
            return None
        service = resolve_service(lower_message, service_names, service_keywords)
        if not service:
            return None
        return record.with_changes(service=service, stage=target)

    return record.with_changes(stage=target)


def detect_order_flow(
    message: str,
    response: str,
    current: OrderRecord | None,
    *,
    phone_number: str = "",
    service_names: Sequence[str] = (),
    service_keywords: Iterable[str] = (),
    signal: str | None = None,
) -> OrderRecord:
    """Return the order record after this turn. Never raises, never has side effects.

    At most one stage step is taken per call and only forward.
    """
    record = current or OrderRecord()
    record = _capture_details(message or "", record, phone_number)

    lower_message = (message or "").lower()
    lower_response = (response or "").lower()
    service_keywords = tuple(service_keywords)

    signalled = _signal_transition(signal, lower_message, record, service_names, service_keywords)
    if signalled is not None:
        return signalled

    return _keyword_transition(lower_message, lower_response, record, service_names, service_keywords)
