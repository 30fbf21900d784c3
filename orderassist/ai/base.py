from __future__ import annotations

from typing import Protocol, Sequence

from orderassist.ai.schema import AssistantReply
from orderassist.conversation.models import ChatTurn


class ResponseGenerator(Protocol):
    name: str

    def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        user_message: str,
    ) -> AssistantReply:
        """Raises GenerationError when the model cannot be reached."""
        ...
