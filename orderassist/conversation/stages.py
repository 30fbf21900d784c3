from __future__ import annotations

from enum import Enum


class OrderStage(str, Enum):
    NONE = "none"
    IDENTIFY_SERVICE = "identify_service"
    CUSTOMIZATION = "customization"
    PRICE_CALCULATION = "price_calculation"
    CUSTOMER_DATA = "customer_data"
    PAYMENT_METHOD = "payment_method"
    FINAL_CONFIRMATION = "final_confirmation"
    DATA_SAVING = "data_saving"
    FOLLOW_UP = "follow_up"


STAGE_ORDER: list[OrderStage] = list(OrderStage)


def stage_index(stage: OrderStage) -> int:
    return STAGE_ORDER.index(stage)


def next_stage(stage: OrderStage) -> OrderStage | None:
    idx = stage_index(stage)
    if idx + 1 >= len(STAGE_ORDER):
        return None
    return STAGE_ORDER[idx + 1]


def parse_stage(value: str | None) -> OrderStage | None:
    if not value:
        return None
    try:
        return OrderStage(str(value).strip().lower())
    except ValueError:
        return None


STAGE_GUIDES: dict[OrderStage, str] = {
    OrderStage.IDENTIFY_SERVICE: "LANGKAH 1: Identifikasi layanan yang diminta user. Tanyakan jika belum jelas.",
    OrderStage.CUSTOMIZATION: "LANGKAH 2: Tanyakan kebutuhan kustomisasi jika layanan mendukung.",
    OrderStage.PRICE_CALCULATION: "LANGKAH 3: Hitung harga dan tampilkan ke user termasuk diskon jika ada.",
    OrderStage.CUSTOMER_DATA: "LANGKAH 4: Kumpulkan data customer (nama, email). Jika sudah terdaftar, konfirmasi data.",
    OrderStage.PAYMENT_METHOD: "LANGKAH 5: Tanyakan metode pembayaran yang dipilih.",
    OrderStage.FINAL_CONFIRMATION: "LANGKAH 6: Tampilkan ringkasan order dan minta konfirmasi.",
    OrderStage.DATA_SAVING: "LANGKAH 7: Simpan data order dan kirim konfirmasi.",
    OrderStage.FOLLOW_UP: "LANGKAH 8: Tanyakan apakah user butuh bantuan lainnya.",
}

PAYMENT_METHODS = ["Transfer Bank", "COD", "E-Wallet"]
