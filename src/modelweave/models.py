"""Core request/response value objects shared by every orchestration layer.

This module defines the normalized Request sent to a model, the Response
produced by one successful call, token Usage, and the CallResult wrapper
that carries either a Response or an orchestration error.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from modelweave.errors import OrchestrationError


class MessageRole(str, Enum):
    """Role of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single chat turn."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str


class Attachment(BaseModel):
    """Tool or image attachment forwarded to capable providers."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(description="'image' or 'tool'")
    name: Optional[str] = None
    url: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class Request(BaseModel):
    """Normalized request for one model call.

    Attributes:
        prompt: User prompt text
        system_prompt: Optional system instructions
        history: Prior conversation turns, oldest first
        temperature: Sampling temperature
        max_tokens: Completion budget (None = model default)
        stop: Stop sequences
        attachments: Optional tool/image attachments
    """

    model_config = ConfigDict(frozen=True)

    prompt: str
    system_prompt: Optional[str] = None
    history: tuple[Message, ...] = ()
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    stop: tuple[str, ...] = ()
    attachments: tuple[Attachment, ...] = ()

    def to_messages(self, include_images: bool = False) -> list[dict[str, Any]]:
        """Build an OpenAI-style messages array.

        Args:
            include_images: Send image attachments as ``image_url`` content
                parts of the user turn

        Returns:
            ``[system?, *history, user]`` as role/content dictionaries
        """
        messages: list[dict[str, Any]] = []
        if self.system_prompt:
            messages.append({"role": MessageRole.SYSTEM.value, "content": self.system_prompt})
        for message in self.history:
            messages.append({"role": message.role.value, "content": message.content})

        images = [a for a in self.attachments if a.kind == "image" and a.url]
        if include_images and images:
            parts: list[dict[str, Any]] = [{"type": "text", "text": self.prompt}]
            parts.extend({"type": "image_url", "image_url": {"url": a.url}} for a in images)
            messages.append({"role": MessageRole.USER.value, "content": parts})
        else:
            messages.append({"role": MessageRole.USER.value, "content": self.prompt})
        return messages

    def tool_definitions(self) -> list[dict[str, Any]]:
        """Tool attachments as OpenAI ``tools`` entries.

        An attachment's ``data`` holds the function's ``description`` and
        JSON-schema ``parameters``.
        """
        return [
            {"type": "function", "function": {"name": a.name, **a.data}}
            for a in self.attachments
            if a.kind == "tool" and a.name
        ]


class Usage(BaseModel):
    """Token usage reported for one call."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    @classmethod
    def of(cls, prompt_tokens: int, completion_tokens: int) -> "Usage":
        """Build usage with a computed total, clamping negatives to zero."""
        prompt = max(0, int(prompt_tokens or 0))
        completion = max(0, int(completion_tokens or 0))
        return cls(prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion)


class Response(BaseModel):
    """Normalized result of one successful model call.

    Attributes:
        content: Generated text
        usage: Token usage
        finish_reason: Provider finish reason
        latency_ms: Wall-clock duration of the external call
        cost: Cost in USD computed from usage and provider pricing
        provider_id: Provider that served the call
        model_id: Model that served the call
        created_at: Completion timestamp
        metadata: Free-form provider metadata
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    content: str
    usage: Usage = Field(default_factory=Usage)
    finish_reason: str = "stop"
    latency_ms: float = Field(default=0.0, ge=0.0)
    cost: float = Field(default=0.0, ge=0.0)
    provider_id: str
    model_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = Field(default_factory=dict)


class CallResult(BaseModel):
    """Outcome of a routed call: a Response on success, an error otherwise.

    Attributes:
        model_id: Model the call was addressed to
        response: Response if the call succeeded
        error: Orchestration error if the call failed
        elapsed_ms: Time spent on the attempt, including failures
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    model_id: str
    response: Optional[Response] = None
    error: Optional[OrchestrationError] = None
    elapsed_ms: float = 0.0

    @property
    def success(self) -> bool:
        """Whether the call produced a response."""
        return self.response is not None and self.error is None

    @classmethod
    def ok(cls, response: Response, elapsed_ms: float = 0.0) -> "CallResult":
        """Build a successful result."""
        return cls(model_id=response.model_id, response=response, elapsed_ms=elapsed_ms)

    @classmethod
    def fail(
        cls, model_id: str, error: OrchestrationError, elapsed_ms: float = 0.0
    ) -> "CallResult":
        """Build a failed result."""
        return cls(model_id=model_id, error=error, elapsed_ms=elapsed_ms)

    def unwrap(self) -> Response:
        """Return the response or raise the carried error.

        Raises:
            OrchestrationError: The error of a failed call
        """
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response
