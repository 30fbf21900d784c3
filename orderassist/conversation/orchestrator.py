from __future__ import annotations

import logging
from typing import Sequence

from orderassist.ai.base import ResponseGenerator
from orderassist.ai.prompts import build_system_prompt
from orderassist.ai.schema import AssistantReply
from orderassist.conversation.handlers import StageHandlers
from orderassist.conversation.models import OrderRecord
from orderassist.conversation.stages import OrderStage
from orderassist.conversation.state_machine import detect_order_flow
from orderassist.conversation.store import ConversationMemory, OrderStateStore, SessionLockRegistry
from orderassist.core.errors import GenerationError
from orderassist.core.metrics import request_metrics
from orderassist.core.request_context import bind_session_id
from orderassist.knowledge.fetcher import KnowledgeFetcher

logger = logging.getLogger(__name__)

APOLOGY_REPLY = "Maaf, terjadi kesalahan dalam memproses pesan Anda. Silakan coba lagi nanti."


class ChatOrchestrator:
    """Runs one conversational turn for a session.

    fetch knowledge -> prompt -> generate -> detect stage -> (on change)
    stage handler -> persist order record -> append history -> reply.

    Turns for the same session key are serialised. ``RetrievalError`` and
    handler persistence errors propagate to the caller; a generation
    failure is answered with an apology and leaves the order untouched.
    """

    def __init__(
        self,
        *,
        knowledge: KnowledgeFetcher,
        generator: ResponseGenerator,
        handlers: StageHandlers,
        memory: ConversationMemory,
        orders: OrderStateStore,
        locks: SessionLockRegistry,
        owner_name: str,
        service_keywords: Sequence[str] = (),
        structured_output: bool = False,
    ) -> None:
        self.knowledge = knowledge
        self.generator = generator
        self.handlers = handlers
        self.memory = memory
        self.orders = orders
        self.locks = locks
        self.owner_name = owner_name
        self.service_keywords = tuple(service_keywords)
        self.structured_output = structured_output

    def process_message(self, message: str, session_id: str, phone_number: str) -> str:
        with bind_session_id(session_id), self.locks.hold(session_id):
            return self._run_turn(message, session_id, phone_number)

    def _run_turn(self, message: str, session_id: str, phone_number: str) -> str:
        history = self.memory.history(session_id)
        stored = self.orders.get(session_id)
        current = stored or OrderRecord()

        snapshot = self.knowledge.fetch_all()
        system_prompt = build_system_prompt(
            snapshot,
            current.stage,
            owner_name=self.owner_name,
            structured=self.structured_output,
        )

        try:
            reply = self.generator.complete(system_prompt, history, message)
        except GenerationError:
            logger.exception("Response generation failed")
            reply = None

        if reply is None:
            self.memory.append_turn(session_id, message, APOLOGY_REPLY)
            return APOLOGY_REPLY

        updated = detect_order_flow(
            message,
            reply.text,
            stored,
            phone_number=phone_number,
            service_names=snapshot.service_names(),
            service_keywords=self.service_keywords,
            signal=reply.order_stage,
        )

        if updated.stage != current.stage:
            updated = self._enter_stage(updated, current.stage, session_id, phone_number, reply)
            self.orders.save(session_id, updated)
        elif stored is not None and updated != stored:
            self.orders.save(session_id, updated)

        self.memory.append_turn(session_id, message, reply.text)
        return reply.text

    def _enter_stage(
        self,
        record: OrderRecord,
        previous: OrderStage,
        session_id: str,
        phone_number: str,
        reply: AssistantReply,
    ) -> OrderRecord:
        logger.info(
            "Order stage changed",
            extra={
                "stage": record.stage.value,
                "previous_stage": previous.value,
                "signalled": bool(reply.order_stage),
            },
        )
        request_metrics.observe_stage(record.stage.value)
        return self.handlers.handle(record.stage, phone_number, session_id, record)
