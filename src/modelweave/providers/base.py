"""Provider adapter protocol.

An adapter turns a normalized Request into one external invocation and
normalizes the provider's reply into a ProviderCompletion. Adapters are
keyed by a provider's ``api_format`` so that new providers are added as
catalog data rather than code branches.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from modelweave.catalog.models import Model, Provider
from modelweave.config import ProviderCredentials
from modelweave.errors import ProviderError
from modelweave.models import Request, Usage


@dataclass
class ProviderCompletion:
    """Provider reply normalized at the adapter boundary.

    Attributes:
        content: Generated text
        usage: Token usage reported by the provider
        finish_reason: Provider finish reason
        metadata: Extra provider fields worth surfacing (ids, raw model name)
    """

    content: str
    usage: Usage = field(default_factory=Usage)
    finish_reason: str = "stop"
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Performs the external call for one provider wire format."""

    async def invoke(
        self,
        provider: Provider,
        model: Model,
        request: Request,
        credentials: ProviderCredentials,
    ) -> ProviderCompletion:
        """Invoke the model and normalize its reply.

        Args:
            provider: Provider definition (endpoint, auth requirement)
            model: Target model
            request: Normalized request; ``max_tokens`` is already resolved
            credentials: Credentials configured for the provider

        Returns:
            Normalized completion

        Raises:
            ProviderError: On transport, authentication or non-2xx failures
        """
        ...


def require_api_key(provider: Provider, credentials: ProviderCredentials) -> str:
    """Return the API key, failing like an upstream 401 when it is missing.

    Providers that do not require auth get an empty key.
    """
    if credentials.api_key:
        return credentials.api_key
    if provider.requires_auth:
        raise ProviderError(
            provider.id, f"API key not configured for {provider.id}", status_code=401
        )
    return ""
