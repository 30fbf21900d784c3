import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from orderassist.conversation.orchestrator import ChatOrchestrator
from orderassist.conversation.store import ProcessedMessageRegistry
from orderassist.core import config
from orderassist.deps import get_notifier, get_orchestrator, get_processed_messages
from orderassist.whatsapp.base import InboundMessage, Notifier, sanitize_payload, safe_json
from orderassist.whatsapp.cloud_provider import extract_first_text_message

router = APIRouter(prefix="/api", tags=["webhook"])
logger = logging.getLogger(__name__)


def _verify(request: Request) -> PlainTextResponse:
    qp = request.query_params
    mode = qp.get("hub.mode")
    token = qp.get("hub.verify_token")
    challenge = qp.get("hub.challenge")

    if mode == "subscribe" and config.WHATSAPP_VERIFY_TOKEN and token == config.WHATSAPP_VERIFY_TOKEN:
        return PlainTextResponse(challenge or "")

    logger.warning("Webhook verification rejected mode=%s", mode)
    raise HTTPException(status_code=403, detail="Verification failed")


def _is_verification(request: Request) -> bool:
    return any(key.startswith("hub.") for key in request.query_params.keys())


def _session_key(message: InboundMessage) -> str:
    if config.WHATSAPP_SESSION_KEY == "sender":
        return message.from_number
    return message.message_id


@router.get("/webhook")
def verify_webhook(request: Request):
    return _verify(request)


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
    notifier: Notifier = Depends(get_notifier),
    processed: ProcessedMessageRegistry = Depends(get_processed_messages),
):
    if _is_verification(request):
        return _verify(request)

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Webhook body is not JSON")
        return {"status": "ok"}

    if not isinstance(payload, dict):
        return {"status": "ok"}

    logger.debug("Webhook payload=%s", safe_json(sanitize_payload(payload)))
    message = extract_first_text_message(payload)
    if message is None:
        return {"status": "ok"}

    try:
        is_new = processed.mark_if_new(message.message_id)
    except Exception:
        logger.exception("Dedup check failed message_id=%s", message.message_id)
        return {"status": "ok"}
    if not is_new:
        logger.info("Duplicate WhatsApp delivery message_id=%s", message.message_id)
        return {"status": "ok"}

    logger.info(
        "WhatsApp received from=%s name=%s message_id=%s phone_number_id=%s",
        message.from_number,
        message.contact_name,
        message.message_id,
        message.phone_number_id,
    )
    await run_in_threadpool(_handle_message, orchestrator, notifier, message)
    return {"status": "ok"}


def _handle_message(orchestrator: ChatOrchestrator, notifier: Notifier, message: InboundMessage) -> None:
    # Meta redelivers on any non-2xx, so nothing downstream may escape.
    try:
        reply = orchestrator.process_message(message.text, _session_key(message), message.from_number)
        notifier.send_text(message.from_number, reply)
    except Exception:
        logger.exception("Failed to process WhatsApp message message_id=%s", message.message_id)
