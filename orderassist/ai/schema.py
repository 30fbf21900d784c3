from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

EMPTY_COMPLETION_REPLY = "Maaf, saya tidak bisa memproses permintaan Anda saat ini."


class AssistantReply(BaseModel):
    text: str = Field(..., min_length=1)
    order_stage: Optional[str] = None


class StructuredCompletion(BaseModel):
    """JSON object the model is asked for when structured output is enabled."""

    message_to_user: str = ""
    order_stage: Optional[str] = None
