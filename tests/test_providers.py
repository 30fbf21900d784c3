from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError

from orderassist.ai.mock_provider import MockResponseGenerator
from orderassist.ai.openai_provider import OpenAIResponseGenerator
from orderassist.ai.prompts import build_system_prompt
from orderassist.ai.schema import EMPTY_COMPLETION_REPLY
from orderassist.conversation.models import ChatTurn
from orderassist.conversation.stages import OrderStage
from orderassist.core.errors import GenerationError, TransportError
from orderassist.knowledge.fetcher import KnowledgeSnapshot
from orderassist.whatsapp.base import sanitize_payload
from orderassist.whatsapp.cloud_provider import CloudWhatsAppProvider, extract_first_text_message
from orderassist.whatsapp.service import WhatsAppNotifier
from tests.fixtures_data import STATUS_ONLY_PAYLOAD, image_message_payload, text_message_payload


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class FailingProvider:
    name = "failing"

    def __init__(self):
        self.calls = 0

    def send_text(self, *, to_phone, text):
        self.calls += 1
        raise TransportError("graph down")


def test_extract_first_text_message():
    message = extract_first_text_message(text_message_payload(message_id="wamid.9", body=" Halo "))

    assert message.message_id == "wamid.9"
    assert message.from_number == "6281299999999"
    assert message.text == "Halo"
    assert message.contact_name == "Tester"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"entry": []},
        {"entry": ["oops"]},
        {"entry": [{"changes": [{"value": "x"}]}]},
        {"entry": [{"changes": [{"value": {"messages": [{"id": 1, "from": "628"}]}}]}]},
        ["entry"],
        STATUS_ONLY_PAYLOAD,
        image_message_payload(),
    ],
)
def test_extract_ignores_non_text_payloads(payload):
    assert extract_first_text_message(payload) is None


def test_notifier_swallows_transport_errors():
    provider = FailingProvider()
    notifier = WhatsAppNotifier(provider)

    assert notifier.send_text("62811", "halo") is None
    assert provider.calls == 1


def test_notifier_skips_empty_address(whatsapp):
    assert WhatsAppNotifier(whatsapp).send_text("", "halo") is None
    assert whatsapp.texts == []


def test_cloud_provider_requires_credentials():
    with pytest.raises(TransportError):
        CloudWhatsAppProvider(access_token="", phone_number_id="").send_text(to_phone="62811", text="x")


def test_cloud_provider_posts_text_message(monkeypatch):
    captured = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = request.read()
        return httpx.Response(200, json={"messages": [{"id": "wamid.out"}]})

    real_client = httpx.Client
    monkeypatch.setattr(
        "orderassist.whatsapp.cloud_provider.httpx.Client",
        lambda **kwargs: real_client(transport=httpx.MockTransport(_handler), **kwargs),
    )

    result = CloudWhatsAppProvider(access_token="secret", phone_number_id="PNID").send_text(
        to_phone="62811", text="halo"
    )

    assert result.provider_message_id == "wamid.out"
    assert captured["url"] == "https://graph.facebook.com/v19.0/PNID/messages"
    assert captured["auth"] == "Bearer secret"
    assert b'"body":"halo"' in captured["body"].replace(b" ", b"")


def test_cloud_provider_raises_on_error_status(monkeypatch):
    real_client = httpx.Client
    monkeypatch.setattr(
        "orderassist.whatsapp.cloud_provider.httpx.Client",
        lambda **kwargs: real_client(
            transport=httpx.MockTransport(lambda request: httpx.Response(401, json={"error": "bad token"})),
            **kwargs,
        ),
    )

    with pytest.raises(TransportError):
        CloudWhatsAppProvider(access_token="t", phone_number_id="P").send_text(to_phone="62811", text="x")


def test_sanitize_payload_masks_tokens():
    sanitized = sanitize_payload({"access_token": "abcdef123456", "nested": [{"token": "xy"}], "text": "hi"})

    assert sanitized == {"access_token": "****3456", "nested": [{"token": "****"}], "text": "hi"}


def test_openai_generator_sends_history_and_settings():
    completions = FakeCompletions(content="Halo!")
    generator = OpenAIResponseGenerator(api_key="k", model="gpt-4", temperature=0.7, client=_client(completions))

    reply = generator.complete("SYSTEM", [ChatTurn("user", "hai"), ChatTurn("assistant", "halo")], "order")

    assert reply.text == "Halo!"
    assert reply.order_stage is None
    assert completions.kwargs["model"] == "gpt-4"
    assert completions.kwargs["temperature"] == 0.7
    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "SYSTEM"},
        {"role": "user", "content": "hai"},
        {"role": "assistant", "content": "halo"},
        {"role": "user", "content": "order"},
    ]
    assert "response_format" not in completions.kwargs


def test_openai_generator_empty_completion_uses_fallback_text():
    generator = OpenAIResponseGenerator(api_key="k", client=_client(FakeCompletions(content=None)))

    assert generator.complete("S", [], "x").text == EMPTY_COMPLETION_REPLY


def test_openai_generator_maps_sdk_errors():
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    generator = OpenAIResponseGenerator(api_key="k", client=_client(FakeCompletions(error=error)))

    with pytest.raises(GenerationError):
        generator.complete("S", [], "x")


def test_openai_generator_structured_output():
    completions = FakeCompletions(content='{"message_to_user": "Total Rp90.000", "order_stage": "customer_data"}')
    generator = OpenAIResponseGenerator(api_key="k", structured=True, client=_client(completions))

    reply = generator.complete("S", [], "oke")

    assert reply.text == "Total Rp90.000"
    assert reply.order_stage == "customer_data"
    assert completions.kwargs["response_format"] == {"type": "json_object"}


def test_openai_generator_structured_output_falls_back_to_raw_text():
    generator = OpenAIResponseGenerator(api_key="k", structured=True, client=_client(FakeCompletions(content="Halo")))

    reply = generator.complete("S", [], "oke")

    assert reply.text == "Halo"
    assert reply.order_stage is None


def test_system_prompt_includes_knowledge_and_structured_instructions():
    snapshot = KnowledgeSnapshot(profile=[["Nama", "Tester"]], services=[["Website", "1", "0", "Yes"]])

    prompt = build_system_prompt(snapshot, OrderStage.CUSTOMER_DATA, owner_name="Tester", structured=True)

    assert "Asisten Digital dari seorang bernama Tester" in prompt
    assert '- Layanan: [["Website", "1", "0", "Yes"]]' in prompt
    assert "STATUS ORDER SAAT INI: CUSTOMER_DATA" in prompt
    assert "LANGKAH 4:" in prompt
    assert '"order_stage"' in prompt


def test_mock_generator_walks_the_keywords():
    generator = MockResponseGenerator()

    assert "order" in generator.complete("", [], "mau order").text.lower()
    assert "custom" in generator.complete("STATUS ORDER SAAT INI: CUSTOMIZATION", [], "biru").text
    assert "berhasil" in generator.complete("STATUS ORDER SAAT INI: DATA_SAVING", [], "ok").text
