"""Tests for the HTTP provider adapters."""

import json

import httpx
import pytest

from modelweave.catalog.defaults import ANTHROPIC, GOOGLE, OPENAI
from modelweave.catalog.models import Model, Provider
from modelweave.config import ProviderCredentials
from modelweave.errors import ProviderError
from modelweave.models import Attachment, Message, MessageRole, Request
from modelweave.providers.http import AnthropicAdapter, GeminiAdapter, OpenAICompatibleAdapter

KEY = ProviderCredentials(api_key="sk-test")


class Recorder:
    """httpx MockTransport handler capturing requests and replying with a fixed body."""

    def __init__(self, status_code: int = 200, body: dict = None) -> None:
        self.status_code = status_code
        self.body = body or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _model(provider: Provider, model_id: str) -> Model:
    return next(m for m in provider.models if m.id == model_id)


@pytest.fixture
def chat_request() -> Request:
    return Request(
        prompt="What is the capital of France?",
        system_prompt="Be brief.",
        history=(Message(role=MessageRole.USER, content="Hi"), Message(role=MessageRole.ASSISTANT, content="Hello")),
        temperature=0.2,
        max_tokens=64,
        stop=("\n\n",),
    )


class TestOpenAICompatibleAdapter:
    @pytest.mark.asyncio
    async def test_invoke_builds_request_and_parses_reply(self, chat_request: Request) -> None:
        recorder = Recorder(
            body={
                "id": "chatcmpl-1",
                "model": "gpt-4o-2024",
                "choices": [{"message": {"content": "Paris."}, "finish_reason": "stop"}],
                "usage": {"prompt_tokens": 20, "completion_tokens": 2},
            }
        )
        adapter = OpenAICompatibleAdapter(client=_client(recorder))

        completion = await adapter.invoke(OPENAI, _model(OPENAI, "gpt-4o"), chat_request, KEY)

        assert completion.content == "Paris."
        assert completion.usage.total_tokens == 22
        assert completion.metadata["id"] == "chatcmpl-1"

        sent = recorder.requests[0]
        assert str(sent.url) == OPENAI.endpoint
        assert sent.headers["Authorization"] == "Bearer sk-test"
        body = recorder.last_json
        assert body["model"] == "gpt-4o"
        assert body["max_tokens"] == 64
        assert body["stop"] == ["\n\n"]
        assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_attachments_forwarded(self) -> None:
        recorder = Recorder(body={"choices": [{"message": {"content": "A cat."}}]})
        adapter = OpenAICompatibleAdapter(client=_client(recorder))
        request = Request(
            prompt="What is in the picture?",
            attachments=(
                Attachment(kind="image", url="https://example.com/cat.png"),
                Attachment(
                    kind="tool",
                    name="lookup",
                    data={"description": "Look up a word", "parameters": {"type": "object"}},
                ),
            ),
        )

        await adapter.invoke(OPENAI, _model(OPENAI, "gpt-4o"), request, KEY)

        body = recorder.last_json
        assert body["messages"][-1]["content"] == [
            {"type": "text", "text": "What is in the picture?"},
            {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}},
        ]
        assert body["tools"] == [
            {
                "type": "function",
                "function": {
                    "name": "lookup",
                    "description": "Look up a word",
                    "parameters": {"type": "object"},
                },
            }
        ]

    @pytest.mark.asyncio
    async def test_api_base_override(self, chat_request: Request) -> None:
        recorder = Recorder(body={"choices": [{"message": {"content": "ok"}}]})
        adapter = OpenAICompatibleAdapter(client=_client(recorder))
        credentials = ProviderCredentials(api_key="k", api_base="http://gateway.local/v1/chat")

        await adapter.invoke(OPENAI, _model(OPENAI, "gpt-4o"), chat_request, credentials)

        assert str(recorder.requests[0].url) == "http://gateway.local/v1/chat"

    @pytest.mark.asyncio
    async def test_error_status_raises_provider_error(self, chat_request: Request) -> None:
        adapter = OpenAICompatibleAdapter(client=_client(Recorder(status_code=503)))

        with pytest.raises(ProviderError) as exc_info:
            await adapter.invoke(OPENAI, _model(OPENAI, "gpt-4o"), chat_request, KEY)

        assert exc_info.value.provider_status == 503
        assert exc_info.value.status_code == 502
        assert exc_info.value.provider_id == "openai"

    @pytest.mark.asyncio
    async def test_missing_api_key_is_unauthorized(self, chat_request: Request) -> None:
        recorder = Recorder()
        adapter = OpenAICompatibleAdapter(client=_client(recorder))

        with pytest.raises(ProviderError) as exc_info:
            await adapter.invoke(
                OPENAI, _model(OPENAI, "gpt-4o"), chat_request, ProviderCredentials()
            )

        assert exc_info.value.provider_status == 401
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_timeout_maps_to_timeout_status(self, chat_request: Request) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        adapter = OpenAICompatibleAdapter(client=_client(handler))

        with pytest.raises(ProviderError) as exc_info:
            await adapter.invoke(OPENAI, _model(OPENAI, "gpt-4o"), chat_request, KEY)

        assert exc_info.value.is_timeout
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_transport_error(self, chat_request: Request) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        adapter = OpenAICompatibleAdapter(client=_client(handler))

        with pytest.raises(ProviderError) as exc_info:
            await adapter.invoke(OPENAI, _model(OPENAI, "gpt-4o"), chat_request, KEY)

        assert exc_info.value.provider_status is None

    @pytest.mark.asyncio
    async def test_unauthenticated_provider_sends_no_auth_header(
        self, chat_request: Request
    ) -> None:
        local = Provider(
            id="local",
            endpoint="http://localhost:11434/v1/chat/completions",
            requires_auth=False,
            models=(Model(id="llama3.2", provider_id="local"),),
        )
        recorder = Recorder(body={"choices": [{"message": {"content": "ok"}}]})
        adapter = OpenAICompatibleAdapter(client=_client(recorder))

        completion = await adapter.invoke(
            local, local.models[0], chat_request, ProviderCredentials()
        )

        assert completion.content == "ok"
        assert "Authorization" not in recorder.requests[0].headers


class TestAnthropicAdapter:
    @pytest.mark.asyncio
    async def test_invoke(self, chat_request: Request) -> None:
        recorder = Recorder(
            body={
                "id": "msg_1",
                "content": [{"type": "text", "text": "Paris"}, {"type": "text", "text": "."}],
                "usage": {"input_tokens": 12, "output_tokens": 3},
                "stop_reason": "end_turn",
            }
        )
        adapter = AnthropicAdapter(client=_client(recorder))

        completion = await adapter.invoke(
            ANTHROPIC, _model(ANTHROPIC, "claude-haiku-4-5"), chat_request, KEY
        )

        assert completion.content == "Paris."
        assert completion.usage.prompt_tokens == 12
        assert completion.usage.completion_tokens == 3

        sent = recorder.requests[0]
        assert sent.headers["x-api-key"] == "sk-test"
        assert sent.headers["anthropic-version"] == "2023-06-01"
        body = recorder.last_json
        assert body["system"] == "Be brief."
        assert body["stop_sequences"] == ["\n\n"]
        assert all(m["role"] != "system" for m in body["messages"])


class TestGeminiAdapter:
    @pytest.mark.asyncio
    async def test_invoke(self, chat_request: Request) -> None:
        recorder = Recorder(
            body={
                "candidates": [
                    {"content": {"parts": [{"text": "Paris"}]}, "finishReason": "STOP"}
                ],
                "usageMetadata": {"promptTokenCount": 9, "candidatesTokenCount": 1},
                "modelVersion": "gemini-2.5-flash-001",
            }
        )
        adapter = GeminiAdapter(client=_client(recorder))

        completion = await adapter.invoke(
            GOOGLE, _model(GOOGLE, "gemini-2.5-flash"), chat_request, KEY
        )

        assert completion.content == "Paris"
        assert completion.usage.total_tokens == 10
        assert completion.metadata["model_version"] == "gemini-2.5-flash-001"

        sent = recorder.requests[0]
        assert str(sent.url).endswith("/models/gemini-2.5-flash:generateContent")
        assert sent.headers["x-goog-api-key"] == "sk-test"
        body = recorder.last_json
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
        assert body["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert body["generationConfig"]["maxOutputTokens"] == 64

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self, chat_request: Request) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"not json")

        adapter = GeminiAdapter(client=_client(handler))

        with pytest.raises(ProviderError, match="Malformed response"):
            await adapter.invoke(GOOGLE, _model(GOOGLE, "gemini-2.5-flash"), chat_request, KEY)


@pytest.mark.asyncio
async def test_adapter_closes_only_owned_client() -> None:
    shared = _client(Recorder())
    adapter = OpenAICompatibleAdapter(client=shared)

    await adapter.close()

    assert not shared.is_closed
    await shared.aclose()
