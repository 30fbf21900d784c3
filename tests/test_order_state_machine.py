from __future__ import annotations

import pytest

from orderassist.conversation.models import CustomerData, OrderRecord
from orderassist.conversation.stages import STAGE_ORDER, OrderStage, next_stage, parse_stage
from orderassist.conversation.state_machine import detect_order_flow, parse_customer_details, resolve_service

CATALOG = ["Website", "Chatbot", "AI"]
KEYWORDS = ["website", "chatbot", "ai"]


def _detect(message, response, record, **kwargs):
    kwargs.setdefault("service_names", CATALOG)
    kwargs.setdefault("service_keywords", KEYWORDS)
    return detect_order_flow(message, response, record, **kwargs)


def test_order_keyword_starts_flow_without_record():
    updated = _detect("saya mau order", "Siap!", None)

    assert updated.stage == OrderStage.IDENTIFY_SERVICE
    assert updated.service is None


def test_pesan_keyword_is_case_insensitive():
    assert _detect("Mau PESAN dong", "", OrderRecord()).stage == OrderStage.IDENTIFY_SERVICE


def test_plain_greeting_keeps_stage_none():
    assert _detect("halo kak", "Halo! Ada yang bisa dibantu?", None) == OrderRecord()


def test_service_name_in_message_selects_service():
    record = OrderRecord(stage=OrderStage.IDENTIFY_SERVICE)

    updated = _detect("Saya butuh website toko", "Oke", record)

    assert updated.stage == OrderStage.CUSTOMIZATION
    assert updated.service == "Website"


def test_keyword_resolves_to_catalog_name():
    assert resolve_service("bikin chatbot wa", ["Chatbot WhatsApp", "Website"], KEYWORDS) == "Chatbot WhatsApp"


def test_keyword_without_catalog_match_is_kept_verbatim():
    assert resolve_service("butuh website", [], KEYWORDS) == "website"


def test_longest_catalog_name_wins():
    assert resolve_service("paket website premium", ["Website", "Website Premium"], ()) == "Website Premium"


def test_identify_service_without_match_stays():
    record = OrderRecord(stage=OrderStage.IDENTIFY_SERVICE)

    assert _detect("hmm masih bingung", "Mau layanan apa?", record) == record


@pytest.mark.parametrize(
    "stage,message,response,expected",
    [
        (OrderStage.CUSTOMIZATION, "warna biru", "Catatan custom diterima", OrderStage.PRICE_CALCULATION),
        (OrderStage.PRICE_CALCULATION, "oke", "Total harga Rp90.000", OrderStage.CUSTOMER_DATA),
        (OrderStage.CUSTOMER_DATA, "oke", "Boleh minta nama kamu?", OrderStage.PAYMENT_METHOD),
        (OrderStage.CUSTOMER_DATA, "oke", "Kirim EMAIL kamu", OrderStage.PAYMENT_METHOD),
        (OrderStage.PAYMENT_METHOD, "COD", "Metode pembayaran dicatat", OrderStage.FINAL_CONFIRMATION),
        (OrderStage.FINAL_CONFIRMATION, "  YA  ", "Diproses", OrderStage.DATA_SAVING),
        (OrderStage.DATA_SAVING, "makasih", "Order berhasil!", OrderStage.FOLLOW_UP),
    ],
)
def test_keyword_rules_advance_one_stage(stage, message, response, expected):
    record = OrderRecord(stage=stage, service="Website")

    assert _detect(message, response, record).stage == expected


def test_confirmation_requires_exact_ya():
    record = OrderRecord(stage=OrderStage.FINAL_CONFIRMATION, service="Website")

    assert _detect("ya dong", "", record).stage == OrderStage.FINAL_CONFIRMATION


def test_follow_up_is_terminal():
    record = OrderRecord(stage=OrderStage.FOLLOW_UP, service="Website")

    assert _detect("order lagi", "Order berhasil total custom", record).stage == OrderStage.FOLLOW_UP


def test_false_positive_in_response_still_advances():
    record = OrderRecord(stage=OrderStage.PRICE_CALCULATION, service="Website")

    updated = _detect("berapa lama?", "Totalnya sekitar 2 minggu pengerjaan", record)

    assert updated.stage == OrderStage.CUSTOMER_DATA


def test_at_most_one_step_per_call():
    record = OrderRecord(stage=OrderStage.CUSTOMIZATION, service="Website")

    updated = _detect("x", "custom total nama pembayaran berhasil", record)

    assert updated.stage == OrderStage.PRICE_CALCULATION


def test_signal_for_next_stage_is_taken():
    record = OrderRecord(stage=OrderStage.PRICE_CALCULATION, service="Website")

    updated = _detect("oke", "Baik", record, signal="customer_data")

    assert updated.stage == OrderStage.CUSTOMER_DATA


def test_signal_skipping_stages_is_ignored_and_keywords_apply():
    record = OrderRecord(stage=OrderStage.PRICE_CALCULATION, service="Website")

    assert _detect("oke", "Baik", record, signal="data_saving").stage == OrderStage.PRICE_CALCULATION
    assert _detect("oke", "Total", record, signal="data_saving").stage == OrderStage.CUSTOMER_DATA


def test_signal_into_customization_still_resolves_service():
    record = OrderRecord(stage=OrderStage.IDENTIFY_SERVICE)

    assert _detect("belum tahu", "", record, signal="customization") == record
    updated = _detect("chatbot aja", "", record, signal="customization")
    assert updated.stage == OrderStage.CUSTOMIZATION
    assert updated.service == "Chatbot"


def test_custom_notes_captured_in_customization():
    record = OrderRecord(stage=OrderStage.CUSTOMIZATION, service="Website")

    updated = _detect("Tema gelap dan logo besar", "Siap", record)

    assert updated.custom_notes == "Tema gelap dan logo besar"
    assert updated.stage == OrderStage.CUSTOMIZATION


def test_customer_details_captured_from_requested_format():
    record = OrderRecord(stage=OrderStage.PAYMENT_METHOD, service="Website")

    updated = _detect("Nama: Siti Aminah\nEmail: siti@example.com", "Terima kasih", record, phone_number="62811")

    assert updated.customer_data == CustomerData(
        name="Siti Aminah", email="siti@example.com", phone="62811", is_new=True
    )


def test_existing_customer_data_is_not_overwritten():
    existing = CustomerData(name="Budi", email="budi@example.com", phone="62811", is_new=False)
    record = OrderRecord(stage=OrderStage.PAYMENT_METHOD, customer_data=existing)

    updated = _detect("Nama: Lain\nEmail: lain@example.com", "", record, phone_number="62811")

    assert updated.customer_data == existing


def test_payment_method_captured():
    record = OrderRecord(stage=OrderStage.PAYMENT_METHOD, service="Website")

    assert _detect("pakai e-wallet ya", "", record).payment_method == "E-Wallet"


def test_parse_customer_details_requires_both_fields():
    assert parse_customer_details("Nama: Budi", "62811") is None


def test_stage_helpers():
    assert STAGE_ORDER[0] == OrderStage.NONE
    assert next_stage(OrderStage.DATA_SAVING) == OrderStage.FOLLOW_UP
    assert next_stage(OrderStage.FOLLOW_UP) is None
    assert parse_stage(" Payment_Method ") == OrderStage.PAYMENT_METHOD
    assert parse_stage("shipping") is None


def test_stages_only_move_forward_over_a_conversation():
    script = [
        ("saya mau order", "Siap"),
        ("website", "Oke, website ya"),
        ("tema gelap", "Catatan custom dicatat"),
        ("lanjut", "Total harga Rp90.000"),
        ("oke", "Boleh minta nama dan email?"),
        ("Nama: Budi\nEmail: budi@example.com", "Pilih metode pembayaran"),
        ("COD", "Ini ringkasannya"),
        ("ya", "Diproses"),
        ("sip", "Order berhasil"),
        ("makasih", "Sama-sama"),
    ]
    record = None
    seen = []
    for message, response in script:
        record = _detect(message, response, record, phone_number="62811")
        seen.append(record.stage)

    indexes = [STAGE_ORDER.index(stage) for stage in seen]
    assert indexes == sorted(indexes)
    assert seen[-1] == OrderStage.FOLLOW_UP
