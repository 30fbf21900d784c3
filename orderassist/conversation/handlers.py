from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from orderassist.conversation.models import CustomerData, OrderRecord
from orderassist.conversation.stages import PAYMENT_METHODS, OrderStage
from orderassist.sheets.gateway import SheetsGateway
from orderassist.sheets.rows import DEFAULT_ORDER_STATUS, CustomerRow, OrderRow
from orderassist.utils.formatting import format_percent, format_rupiah
from orderassist.utils.ids import generate_id
from orderassist.whatsapp.base import Notifier

logger = logging.getLogger(__name__)


def _utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class StageHandlers:
    """Side effects run once when an order enters a stage.

    Every handler takes ``(address, session_key, record)`` and returns the
    record to persist; handlers never write order state themselves.
    """

    def __init__(
        self,
        gateway: SheetsGateway,
        notifier: Notifier,
        *,
        payment_instructions: str,
        id_factory: Callable[[], str] = generate_id,
        today: Callable[[], str] = _utc_today,
    ) -> None:
        self.gateway = gateway
        self.notifier = notifier
        self.payment_instructions = payment_instructions
        self.id_factory = id_factory
        self.today = today
        self._handlers: dict[OrderStage, Callable[[str, str, OrderRecord], OrderRecord]] = {
            OrderStage.IDENTIFY_SERVICE: self.send_service_list,
            OrderStage.CUSTOMIZATION: self.ask_for_customization,
            OrderStage.PRICE_CALCULATION: self.send_price,
            OrderStage.CUSTOMER_DATA: self.handle_customer_data,
            OrderStage.PAYMENT_METHOD: self.ask_for_payment_method,
            OrderStage.FINAL_CONFIRMATION: self.send_order_summary,
            OrderStage.DATA_SAVING: self.save_order,
            OrderStage.FOLLOW_UP: self.send_follow_up,
        }

    def handle(self, stage: OrderStage, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        handler = self._handlers.get(stage)
        if handler is None:
            return record
        return handler(address, session_key, record)

    def send_service_list(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        names = self.gateway.list_service_names()
        service_list = "\n".join(f"- {name}" for name in names)
        self.notifier.send_text(
            address,
            f"🚀 Anda ingin memesan jasa? Kami menyediakan:\n{service_list}\n\n"
            "Silakan sebutkan layanan yang Anda butuhkan.",
        )
        return record

    def ask_for_customization(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        service = self.gateway.get_service_details(record.service or "")
        if service is not None and service.customizable:
            self.notifier.send_text(address, "🎨 Produk ini bisa disesuaikan. Silakan tambahkan catatan custom Anda.")
        return record

    def send_price(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        service = self.gateway.get_service_details(record.service or "")
        if service is None:
            logger.warning("No catalog entry for service=%s", record.service)
            return record

        text = f"💰 Harga dasar: {format_rupiah(service.base_price)}"
        if service.discount_pct > 0:
            text += f"\n🎁 Diskon {format_percent(service.discount_pct)}%: {format_rupiah(service.discount_amount)}"
        text += f"\n\n💵 Total: {format_rupiah(service.total_price)}"
        self.notifier.send_text(address, text)
        return record.with_changes(price=service.total_price)

    def handle_customer_data(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        customer = self.gateway.get_customer(address)
        if customer:
            self.notifier.send_text(
                address,
                f"👋 Konfirmasi data Anda:\nNama: {customer.name}\nEmail: {customer.email}\n\n"
                "Apa data masih benar? (Ya/Tidak)",
            )
            return record.with_changes(
                customer_data=CustomerData(name=customer.name, email=customer.email, phone=address, is_new=False)
            )

        self.notifier.send_text(
            address,
            "📋 Kami membutuhkan beberapa data untuk melanjutkan:\n1. Nama lengkap\n2. Email\n\n"
            "Silakan kirim dalam format:\nNama: [nama Anda]\nEmail: [email Anda]",
        )
        return record

    def ask_for_payment_method(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        options = "\n".join(f"- {method}" for method in PAYMENT_METHODS)
        self.notifier.send_text(address, f"💳 Pilih metode pembayaran:\n{options}")
        return record

    def send_order_summary(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        total = format_rupiah(record.price) if record.price is not None else "-"
        email = record.customer_data.email if record.customer_data and record.customer_data.email else "-"
        lines = [
            "📋 **Order Summary**",
            f"* Layanan: {record.service or '-'}",
            f"* Kustomisasi: {record.custom_notes or '-'}",
            "* Jumlah: 1",
            f"* Total: {total}",
            f"* Email: {email}",
            f"* Pembayaran: {record.payment_method or '-'}",
            "",
            "Apakah data sudah benar? Ketik 'YA' untuk proses atau 'UBAH' untuk revisi.",
        ]
        self.notifier.send_text(address, "\n".join(lines))
        return record

    def save_order(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        customer = record.customer_data
        if customer and customer.is_new:
            self.gateway.update_customer(
                CustomerRow(id=self.id_factory(), name=customer.name, phone=address, email=customer.email)
            )

        self.gateway.update_order(
            OrderRow(
                date=self.today(),
                customer_name=customer.name if customer else "",
                email=customer.email if customer else "",
                service=record.service or "",
                description=record.custom_notes or "",
                status=DEFAULT_ORDER_STATUS,
            )
        )
        logger.info("Order saved session=%s service=%s", session_key, record.service)

        # Shown to the customer only, the order row does not carry it
        display_id = self.id_factory()
        self.notifier.send_text(
            address,
            f"✅ Order berhasil! ID Order: {display_id}\n\nSilakan bayar ke {self.payment_instructions}.",
        )
        return record

    def send_follow_up(self, address: str, session_key: str, record: OrderRecord) -> OrderRecord:
        self.notifier.send_text(address, "🤔 Apakah Anda masih membutuhkan bantuan lainnya?")
        return record
