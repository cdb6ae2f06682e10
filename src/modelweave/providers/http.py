"""HTTP adapters for the provider wire formats the orchestrator speaks.

Each adapter builds its provider's request body and headers, posts it with a
shared httpx client and normalizes the reply. Supported formats:

- ``openai``: OpenAI-compatible chat completions (OpenAI, Cerebras, gateways)
- ``anthropic``: Anthropic messages API
- ``gemini``: Google Generative Language ``generateContent``
"""

import logging
from typing import Any, Optional

import httpx

from modelweave.catalog.models import Model, Provider
from modelweave.config import ProviderCredentials
from modelweave.errors import ProviderError
from modelweave.models import Request, Usage
from modelweave.providers.base import ProviderCompletion, require_api_key

logger = logging.getLogger(__name__)


class HTTPProviderAdapter:
    """Base class for JSON-over-HTTP provider adapters.

    Subclasses implement ``build_url``, ``build_headers``, ``build_payload``
    and ``parse_response``. The HTTP client is created lazily and may be
    shared between adapters.

    Example:
        >>> async with OpenAICompatibleAdapter() as adapter:
        ...     completion = await adapter.invoke(provider, model, request, credentials)
    """

    def __init__(
        self, client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Optional shared httpx client (the adapter will not close it)
            timeout: Default timeout in seconds for a client created here
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HTTPProviderAdapter":
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        await self.close()

    def endpoint(self, provider: Provider, credentials: ProviderCredentials) -> str:
        return credentials.api_base or provider.endpoint

    def build_url(self, provider: Provider, model: Model, credentials: ProviderCredentials) -> str:
        return self.endpoint(provider, credentials)

    def build_headers(self, api_key: str) -> dict[str, str]:
        raise NotImplementedError

    def build_payload(self, model: Model, request: Request) -> dict[str, Any]:
        raise NotImplementedError

    def parse_response(self, data: dict[str, Any]) -> ProviderCompletion:
        raise NotImplementedError

    async def invoke(
        self,
        provider: Provider,
        model: Model,
        request: Request,
        credentials: ProviderCredentials,
    ) -> ProviderCompletion:
        """Post the request and normalize the reply.

        Raises:
            ProviderError: On missing credentials, transport failure,
                non-2xx status or an unparseable body
        """
        api_key = require_api_key(provider, credentials)
        url = self.build_url(provider, model, credentials)
        headers = {"Content-Type": "application/json", **self.build_headers(api_key)}
        payload = self.build_payload(model, request)

        try:
            response = await self.client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderError(provider.id, f"Request timed out: {e}", status_code="timeout") from e
        except httpx.HTTPError as e:
            raise ProviderError(provider.id, f"Transport error: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "%s API error %s: %s", provider.id, response.status_code, response.text[:500]
            )
            raise ProviderError(
                provider.id,
                f"{provider.id} API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return self.parse_response(response.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderError(
                provider.id, f"Malformed response: {e}", status_code=response.status_code
            ) from e


class OpenAICompatibleAdapter(HTTPProviderAdapter):
    """Adapter for OpenAI-style ``/chat/completions`` endpoints."""

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def build_payload(self, model: Model, request: Request) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model.id,
            "messages": request.to_messages(include_images=True),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "stream": False,
        }
        if request.stop:
            payload["stop"] = list(request.stop)
        tools = request.tool_definitions()
        if tools:
            payload["tools"] = tools
        return payload

    def parse_response(self, data: dict[str, Any]) -> ProviderCompletion:
        choice = (data.get("choices") or [{}])[0]
        usage = data.get("usage") or {}
        return ProviderCompletion(
            content=(choice.get("message") or {}).get("content") or "",
            usage=Usage.of(usage.get("prompt_tokens", 0), usage.get("completion_tokens", 0)),
            finish_reason=choice.get("finish_reason") or "stop",
            metadata={"id": data.get("id"), "model": data.get("model")},
        )


class AnthropicAdapter(HTTPProviderAdapter):
    """Adapter for the Anthropic messages API."""

    api_version = "2023-06-01"

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {"x-api-key": api_key, "anthropic-version": self.api_version}

    def build_payload(self, model: Model, request: Request) -> dict[str, Any]:
        messages = [m for m in request.to_messages() if m["role"] != "system"]
        payload: dict[str, Any] = {
            "model": model.id,
            "messages": messages,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        if request.stop:
            payload["stop_sequences"] = list(request.stop)
        return payload

    def parse_response(self, data: dict[str, Any]) -> ProviderCompletion:
        blocks = data.get("content") or []
        text = "".join(block.get("text", "") for block in blocks if block.get("type") == "text")
        usage = data.get("usage") or {}
        return ProviderCompletion(
            content=text,
            usage=Usage.of(usage.get("input_tokens", 0), usage.get("output_tokens", 0)),
            finish_reason=data.get("stop_reason") or "end_turn",
            metadata={"id": data.get("id"), "model": data.get("model")},
        )


class GeminiAdapter(HTTPProviderAdapter):
    """Adapter for Google's ``generateContent`` endpoint."""

    def build_url(self, provider: Provider, model: Model, credentials: ProviderCredentials) -> str:
        base = self.endpoint(provider, credentials).rstrip("/")
        return f"{base}/{model.id}:generateContent"

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {"x-goog-api-key": api_key} if api_key else {}

    def build_payload(self, model: Model, request: Request) -> dict[str, Any]:
        contents = [
            {
                "role": "model" if message["role"] == "assistant" else "user",
                "parts": [{"text": message["content"]}],
            }
            for message in request.to_messages()
            if message["role"] != "system"
        ]
        generation_config: dict[str, Any] = {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_tokens,
        }
        if request.stop:
            generation_config["stopSequences"] = list(request.stop)

        payload: dict[str, Any] = {"contents": contents, "generationConfig": generation_config}
        if request.system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": request.system_prompt}]}
        return payload

    def parse_response(self, data: dict[str, Any]) -> ProviderCompletion:
        candidate = (data.get("candidates") or [{}])[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        usage = data.get("usageMetadata") or {}
        return ProviderCompletion(
            content="".join(part.get("text", "") for part in parts),
            usage=Usage.of(
                usage.get("promptTokenCount", 0), usage.get("candidatesTokenCount", 0)
            ),
            finish_reason=candidate.get("finishReason") or "STOP",
            metadata={"model_version": data.get("modelVersion")},
        )
