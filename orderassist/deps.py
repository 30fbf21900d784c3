from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from orderassist.ai.service import get_provider as get_ai_provider
from orderassist.conversation.handlers import StageHandlers
from orderassist.conversation.orchestrator import ChatOrchestrator
from orderassist.conversation.store import (
    ConversationMemory,
    DatabaseSessionStore,
    InMemorySessionStore,
    OrderStateStore,
    ProcessedMessageRegistry,
    SessionLockRegistry,
    SessionStore,
)
from orderassist.core.config import (
    AI_STRUCTURED_OUTPUT,
    ASSISTANT_OWNER_NAME,
    PAYMENT_INSTRUCTIONS,
    SERVICE_KEYWORDS,
    SESSION_STORE,
    SESSION_TTL_SECONDS,
)
from orderassist.core.database import SessionLocal
from orderassist.knowledge.fetcher import KnowledgeFetcher
from orderassist.sheets.gateway import SheetsGateway
from orderassist.sheets.service import build_gateway
from orderassist.whatsapp.base import Notifier
from orderassist.whatsapp.service import WhatsAppNotifier, get_provider as get_whatsapp_provider

logger = logging.getLogger(__name__)


@dataclass
class Services:
    gateway: SheetsGateway
    notifier: Notifier
    orchestrator: ChatOrchestrator
    processed_messages: ProcessedMessageRegistry


def build_session_store(kind: str | None = None) -> SessionStore:
    kind = (kind or SESSION_STORE or "memory").strip().lower()
    if kind == "database":
        return DatabaseSessionStore(SessionLocal, ttl_seconds=SESSION_TTL_SECONDS)
    return InMemorySessionStore(ttl_seconds=SESSION_TTL_SECONDS)


def build_services(
    *,
    gateway: SheetsGateway | None = None,
    notifier: Notifier | None = None,
    generator=None,
    store: SessionStore | None = None,
    id_factory=None,
) -> Services:
    gateway = gateway or build_gateway()
    notifier = notifier or WhatsAppNotifier(get_whatsapp_provider())
    generator = generator or get_ai_provider()
    store = store or build_session_store()

    handler_kwargs = {"payment_instructions": PAYMENT_INSTRUCTIONS}
    if id_factory is not None:
        handler_kwargs["id_factory"] = id_factory

    orchestrator = ChatOrchestrator(
        knowledge=KnowledgeFetcher(gateway),
        generator=generator,
        handlers=StageHandlers(gateway, notifier, **handler_kwargs),
        memory=ConversationMemory(store),
        orders=OrderStateStore(store),
        locks=SessionLockRegistry(),
        owner_name=ASSISTANT_OWNER_NAME,
        service_keywords=SERVICE_KEYWORDS,
        structured_output=AI_STRUCTURED_OUTPUT,
    )
    logger.info(
        "Services ready sheets=%s ai=%s store=%s",
        gateway.backend.name,
        getattr(generator, "name", type(generator).__name__),
        type(store).__name__,
    )
    return Services(
        gateway=gateway,
        notifier=notifier,
        orchestrator=orchestrator,
        processed_messages=ProcessedMessageRegistry(store),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services()


def get_orchestrator() -> ChatOrchestrator:
    return get_services().orchestrator


def get_gateway() -> SheetsGateway:
    return get_services().gateway


def get_notifier() -> Notifier:
    return get_services().notifier


def get_processed_messages() -> ProcessedMessageRegistry:
    return get_services().processed_messages
