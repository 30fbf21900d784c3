from __future__ import annotations

from typing import Callable, Sequence

import pytest

from orderassist.ai.schema import AssistantReply
from orderassist.conversation.models import ChatTurn
from orderassist.conversation.store import InMemorySessionStore
from orderassist.deps import build_services
from orderassist.sheets.gateway import SheetsGateway
from orderassist.sheets.mock_provider import InMemorySheetsBackend
from orderassist.whatsapp.mock_provider import MockWhatsAppProvider
from orderassist.whatsapp.service import WhatsAppNotifier
from tests.fixtures_data import build_tables


class ScriptedGenerator:
    """Response generator fake: replies come from a callable or a fixed text."""

    name = "scripted"

    def __init__(self, reply: str | Callable[[str, str], AssistantReply | str] = "ok") -> None:
        self.reply = reply
        self.calls: list[dict] = []

    def complete(self, system_prompt: str, history: Sequence[ChatTurn], user_message: str) -> AssistantReply:
        self.calls.append({"system_prompt": system_prompt, "history": list(history), "user_message": user_message})
        result = self.reply(system_prompt, user_message) if callable(self.reply) else self.reply
        if isinstance(result, AssistantReply):
            return result
        return AssistantReply(text=result)


@pytest.fixture()
def sheets_backend():
    return InMemorySheetsBackend(build_tables())


@pytest.fixture()
def gateway(sheets_backend):
    return SheetsGateway(sheets_backend)


@pytest.fixture()
def whatsapp():
    return MockWhatsAppProvider()


@pytest.fixture()
def notifier(whatsapp):
    return WhatsAppNotifier(whatsapp)


@pytest.fixture()
def session_store():
    return InMemorySessionStore()


@pytest.fixture()
def generator():
    return ScriptedGenerator()


@pytest.fixture()
def services(gateway, notifier, generator, session_store):
    ids = iter(f"ID{index:06d}" for index in range(1, 1000))
    return build_services(
        gateway=gateway,
        notifier=notifier,
        generator=generator,
        store=session_store,
        id_factory=lambda: next(ids),
    )
