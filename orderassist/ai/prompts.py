from __future__ import annotations

import json
from typing import Any

from orderassist.conversation.stages import STAGE_GUIDES, OrderStage
from orderassist.knowledge.fetcher import KnowledgeSnapshot

STRUCTURED_OUTPUT_INSTRUCTIONS = (
    "FORMAT JAWABAN:\n"
    "Balas HANYA dengan objek JSON: "
    '{"message_to_user": "<balasan untuk user>", "order_stage": "<stage berikutnya atau null>"}.\n'
    "Isi order_stage hanya jika percakapan jelas maju ke tahap order berikutnya. "
    "Nilai yang valid: " + ", ".join(stage.value for stage in OrderStage if stage != OrderStage.NONE) + "."
)


def _dump(rows: list[list[Any]]) -> str:
    return json.dumps(rows, ensure_ascii=False)


def build_order_flow_guide(stage: OrderStage) -> str:
    if stage == OrderStage.NONE:
        return ""
    return f"PANDUAN ORDER SAAT INI:\n{STAGE_GUIDES.get(stage, '')}"


def build_system_prompt(
    knowledge: KnowledgeSnapshot,
    stage: OrderStage,
    *,
    owner_name: str,
    structured: bool = False,
) -> str:
    status_line = f"STATUS ORDER SAAT INI: {stage.value.upper()}" if stage != OrderStage.NONE else ""
    sections = [
        "1. IDENTITAS & PERAN",
        "Role:",
        f"Kamu adalah Asisten Digital dari seorang bernama {owner_name}. Data tentangnya:",
        _dump(knowledge.profile),
        "",
        "Tugas kamu:",
        "- Menjadi frontliner yang ramah, gaul, dan profesional",
        f"- Menjawab pertanyaan user terkait {owner_name}",
        "- Memandu user melalui proses order jasa (website, chatbot, AI)",
        "- Menggunakan data dari Google Sheets (portofolio, layanan, testimoni)",
        "- Menggunakan bahasa user (Indonesia gaul/English) dan style obrolan santai tapi meyakinkan",
        "",
        "Tone & Personality:",
        "😎 Cool tapi informatif, selalu ada icon keren tiap respon",
        "🚀 Hype tapi jujur (no overpromise)",
        f"🧠 Smart (gunakan data nyata dari portofolio {owner_name})",
        "",
        status_line,
        "",
        "DATA YANG TERSEDIA:",
        f"- Layanan: {_dump(knowledge.services)}",
        f"- Portofolio: {_dump(knowledge.portfolio)}",
        f"- Testimoni: {_dump(knowledge.testimonials)}",
        f"- Skills: {_dump(knowledge.skills)}",
        f"- Social Media: {_dump(knowledge.social_media)}",
        f"- FAQ: {_dump(knowledge.faq)}",
        f"- Orders: {_dump(knowledge.orders)}",
        f"- Customers: {_dump(knowledge.customers)}",
        "",
        build_order_flow_guide(stage),
    ]
    if structured:
        sections.extend(["", STRUCTURED_OUTPUT_INSTRUCTIONS])
    return "\n".join(sections).strip()
