from __future__ import annotations

from typing import Sequence

from orderassist.ai.schema import AssistantReply
from orderassist.conversation.models import ChatTurn


class MockResponseGenerator:
    """Rule-based replies for local runs without an API key.

    The replies contain the words the stage detection listens for, so a
    full order can be walked through from the chat endpoint.
    """

    name = "mock"

    def complete(self, system_prompt: str, history: Sequence[ChatTurn], user_message: str) -> AssistantReply:
        text = (user_message or "").strip().lower()
        prompt = system_prompt or ""

        if "STATUS ORDER SAAT INI: DATA_SAVING" in prompt:
            return AssistantReply(text="🎉 Order kamu berhasil dicatat!")
        if "STATUS ORDER SAAT INI: PAYMENT_METHOD" in prompt:
            return AssistantReply(text="👍 Metode pembayaran dicatat, cek ringkasan order ya.")
        if "STATUS ORDER SAAT INI: CUSTOMER_DATA" in prompt:
            return AssistantReply(text="📝 Sip, nama dan email kamu kami catat.")
        if "STATUS ORDER SAAT INI: PRICE_CALCULATION" in prompt:
            return AssistantReply(text="💵 Total harga sudah kami kirim.")
        if "STATUS ORDER SAAT INI: CUSTOMIZATION" in prompt:
            return AssistantReply(text="🎨 Catatan custom kamu sudah kami terima.")
        if "order" in text or "pesan" in text:
            return AssistantReply(text="🚀 Mau order jasa apa nih? Website, chatbot, atau AI?")
        if "halo" in text or "hai" in text:
            return AssistantReply(text="👋 Halo! Ada yang bisa dibantu?")
        return AssistantReply(text="🤖 Siap, ada lagi yang mau ditanyakan?")
