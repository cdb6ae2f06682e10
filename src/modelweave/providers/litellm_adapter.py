"""LiteLLM-backed provider adapter.

Routes a call through ``litellm.acompletion`` so that any provider LiteLLM
supports can be used without a dedicated wire adapter. Credentials are
passed per call instead of through process environment variables.
"""

import logging
import warnings
from typing import Any

from modelweave.catalog.models import Model, Provider
from modelweave.config import ProviderCredentials
from modelweave.errors import ProviderError
from modelweave.models import Request, Usage
from modelweave.providers.base import ProviderCompletion

# Suppress Pydantic serialization warnings emitted inside litellm
warnings.filterwarnings("ignore", message=".*Pydantic serializer warnings.*")

logger = logging.getLogger(__name__)

# Catalog provider ids whose LiteLLM prefix differs
LITELLM_PREFIXES = {"google": "gemini"}


def litellm_model_name(provider: Provider, model: Model) -> str:
    """Build the ``<prefix>/<model>`` name LiteLLM routes on.

    Model ids that already carry a prefix are passed through.

    Example:
        >>> litellm_model_name(GOOGLE, gemini_flash)
        'gemini/gemini-2.5-flash'
    """
    if "/" in model.id:
        return model.id
    prefix = LITELLM_PREFIXES.get(provider.id, provider.id)
    return f"{prefix}/{model.id}"


class LiteLLMAdapter:
    """Adapter that delegates the provider call to LiteLLM.

    LiteLLM's own retries are disabled; a failed call is reported once and
    the caller decides what to do next (cascade, consensus, ...).
    """

    def __init__(self, timeout: float = 60.0) -> None:
        """Initialize the adapter.

        Args:
            timeout: Timeout in seconds passed to LiteLLM
        """
        self._timeout = timeout
        self._setup_litellm()

    def _setup_litellm(self) -> None:
        import litellm

        litellm.num_retries = 0

    async def invoke(
        self,
        provider: Provider,
        model: Model,
        request: Request,
        credentials: ProviderCredentials,
    ) -> ProviderCompletion:
        """Call the model through LiteLLM.

        Raises:
            ProviderError: With LiteLLM's status code when it reports one,
                or ``"timeout"`` when the call timed out
        """
        import litellm

        kwargs: dict[str, Any] = {
            "model": litellm_model_name(provider, model),
            "messages": request.to_messages(include_images=True),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "timeout": self._timeout,
        }
        if request.stop:
            kwargs["stop"] = list(request.stop)
        tools = request.tool_definitions()
        if tools:
            kwargs["tools"] = tools
        if credentials.api_key:
            kwargs["api_key"] = credentials.api_key
        if credentials.api_base:
            kwargs["api_base"] = credentials.api_base

        try:
            response = await litellm.acompletion(**kwargs)
        except litellm.Timeout as e:
            raise ProviderError(provider.id, f"Request timed out: {e}", status_code="timeout") from e
        except Exception as e:
            logger.warning("LiteLLM call to %s failed: %s", kwargs["model"], e)
            raise ProviderError(
                provider.id, str(e), status_code=getattr(e, "status_code", None)
            ) from e

        return self._normalize(response)

    @staticmethod
    def _normalize(response: Any) -> ProviderCompletion:
        """Convert a LiteLLM ModelResponse into a ProviderCompletion."""
        choice = response.choices[0]
        content = choice.message.content or ""

        usage = getattr(response, "usage", None)
        prompt_tokens = getattr(usage, "prompt_tokens", 0) if usage else 0
        completion_tokens = getattr(usage, "completion_tokens", 0) if usage else 0

        return ProviderCompletion(
            content=content,
            usage=Usage.of(prompt_tokens, completion_tokens),
            finish_reason=getattr(choice, "finish_reason", None) or "stop",
            metadata={"id": getattr(response, "id", None), "model": getattr(response, "model", None)},
        )
