"""Result types for multi-model strategies."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from modelweave.errors import OrchestrationError, StrategyError
from modelweave.models import CallResult, Response


class Strategy(str, Enum):
    """How a request is fanned out over several models."""

    PARALLEL = "parallel"
    CASCADE = "cascade"
    CONSENSUS = "consensus"
    BEST_OF_N = "best-of-n"

    @classmethod
    def parse(cls, value: Union["Strategy", str]) -> "Strategy":
        """Convert a strategy name into a Strategy.

        Accepts ``best_of_n`` as an alias of ``best-of-n``.

        Raises:
            StrategyError: If the name is not a known strategy
        """
        if isinstance(value, Strategy):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            raise StrategyError(str(value)) from None


class ModelFailure(BaseModel):
    """A failed attempt inside a strategy run."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    error_code: str
    message: str
    retryable: bool = False
    elapsed_ms: float = 0.0

    @classmethod
    def from_result(cls, result: CallResult) -> "ModelFailure":
        error = result.error or OrchestrationError("call produced no response")
        return cls(
            model_id=result.model_id,
            error_code=error.error_code,
            message=error.message,
            retryable=error.retryable,
            elapsed_ms=result.elapsed_ms,
        )


class ConsensusResult(BaseModel):
    """Reduction of several answers to the one most models agree on.

    Attributes:
        content: Representative answer of the largest agreeing cluster
        support: Number of responses in that cluster
        total: Number of responses considered
        agreed: Whether ``support`` reached the consensus threshold
        themes: Words recurring across responses, most frequent first
        model_ids: Models whose answers are in the majority cluster
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    content: str = ""
    support: int = 0
    total: int = 0
    agreed: bool = False
    themes: list[str] = Field(default_factory=list)
    model_ids: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        """Theme summary in the ``Consensus themes: a, b`` form."""
        if self.themes:
            return f"Consensus themes: {', '.join(self.themes)}"
        return "No clear consensus found"


class MultiCallResult(BaseModel):
    """Outcome of a strategy run.

    Attributes:
        strategy: Strategy that produced the result
        responses: Successful responses (sorted by score for best-of-n)
        best: Highest scoring response, if any
        consensus: Consensus reduction (consensus strategy only)
        failures: Failed attempts in call order
        total_cost: Cost of successful responses
        total_time_ms: Wall-clock span of the whole run
        success: Strategy-specific success flag
        run_id: Correlation id of the run
    """

    model_config = ConfigDict(protected_namespaces=())

    strategy: Strategy
    responses: list[Response] = Field(default_factory=list)
    best: Optional[Response] = None
    consensus: Optional[ConsensusResult] = None
    failures: list[ModelFailure] = Field(default_factory=list)
    total_cost: float = 0.0
    total_time_ms: float = 0.0
    success: bool = False
    run_id: Optional[str] = None

    @property
    def attempted(self) -> int:
        return len(self.responses) + len(self.failures)
