from __future__ import annotations

import logging

from orderassist.ai.base import ResponseGenerator
from orderassist.ai.mock_provider import MockResponseGenerator
from orderassist.ai.openai_provider import OpenAIResponseGenerator
from orderassist.core.config import (
    AI_PROVIDER,
    AI_STRUCTURED_OUTPUT,
    OPENAI_API_KEY,
    OPENAI_MODEL,
    OPENAI_TEMPERATURE,
)

logger = logging.getLogger(__name__)


def get_provider(provider: str | None = None) -> ResponseGenerator:
    provider = (provider or AI_PROVIDER or "openai").strip().lower()
    if provider == "mock":
        return MockResponseGenerator()
    if not OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is empty, completions will fail")
    return OpenAIResponseGenerator(
        api_key=OPENAI_API_KEY,
        model=OPENAI_MODEL,
        temperature=OPENAI_TEMPERATURE,
        structured=AI_STRUCTURED_OUTPUT,
    )
