from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from orderassist.conversation.orchestrator import ChatOrchestrator
from orderassist.deps import get_orchestrator

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str
    session_id: str = Field(..., alias="sessionId", min_length=1)
    phone_number: str = Field("", alias="phoneNumber")


@router.post("/chat")
def chat(payload: ChatRequest, orchestrator: ChatOrchestrator = Depends(get_orchestrator)):
    try:
        response = orchestrator.process_message(payload.message, payload.session_id, payload.phone_number)
    except Exception:
        logger.exception("Failed to process chat message session=%s", payload.session_id)
        return JSONResponse(status_code=500, content={"error": "Failed to process message"})
    return {"response": response}
