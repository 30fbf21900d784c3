from __future__ import annotations

import json
import logging
from typing import Sequence

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from orderassist.ai.schema import EMPTY_COMPLETION_REPLY, AssistantReply, StructuredCompletion
from orderassist.conversation.models import ChatTurn
from orderassist.core.errors import GenerationError

logger = logging.getLogger(__name__)


class OpenAIResponseGenerator:
    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gpt-4",
        temperature: float = 0.7,
        structured: bool = False,
        timeout: float = 60.0,
        client: OpenAI | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.structured = structured
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> OpenAI:
        # Built on first use: the SDK refuses to construct without a key
        if self._client is None:
            try:
                # No retries, a failed call becomes the apology reply
                self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            except OpenAIError as exc:
                raise GenerationError(f"OpenAI client unavailable: {exc}") from exc
        return self._client

    def complete(self, system_prompt: str, history: Sequence[ChatTurn], user_message: str) -> AssistantReply:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(turn.to_dict() for turn in history)
        messages.append({"role": "user", "content": user_message})

        params = {"model": self.model, "messages": messages, "temperature": self.temperature}
        if self.structured:
            params["response_format"] = {"type": "json_object"}

        logger.info("Calling OpenAI model=%s messages=%s", self.model, len(messages))
        try:
            completion = self.client.chat.completions.create(**params)
        except OpenAIError as exc:
            raise GenerationError(f"OpenAI request failed: {exc}") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if self.structured:
            return self._parse_structured(content)
        return AssistantReply(text=content or EMPTY_COMPLETION_REPLY)

    def _parse_structured(self, content: str | None) -> AssistantReply:
        if not content:
            return AssistantReply(text=EMPTY_COMPLETION_REPLY)
        try:
            parsed = StructuredCompletion.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError):
            # Model ignored the format; use the raw text and fall back to keywords
            logger.warning("Structured completion could not be parsed, using raw text")
            return AssistantReply(text=content)
        return AssistantReply(
            text=parsed.message_to_user or EMPTY_COMPLETION_REPLY,
            order_stage=parsed.order_stage,
        )
