"""Chain graph description and execution result models.

A chain graph is a DAG of typed nodes. Node kinds form a closed union
discriminated on ``type``; each kind carries its own typed ``data``. Graph
descriptions written with camelCase keys (``maxTokens``, ``toolName``,
``sourceHandle``) are accepted as well.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
    model_validator,
)

from modelweave.errors import InvalidGraphError, OrchestrationError

MERGE_SEPARATOR = "\n\n---\n\n"


class NodeData(BaseModel):
    """Fields shared by every node kind."""

    model_config = ConfigDict(frozen=True, extra="ignore", protected_namespaces=())

    label: Optional[str] = None


class PromptNodeData(NodeData):
    prompt: str = ""


class LLMNodeData(NodeData):
    """Configuration of an llm node.

    Attributes:
        prompt: Base text placed before the predecessors' outputs
        model: Model id (defaults to the executor's default model)
        system_prompt: Optional system instructions
        max_tokens: Completion budget
        temperature: Sampling temperature
    """

    prompt: str = ""
    model: Optional[str] = None
    system_prompt: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("system_prompt", "systemPrompt")
    )
    max_tokens: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("max_tokens", "maxTokens")
    )
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)


class ToolNodeData(NodeData):
    tool_name: str = Field(validation_alias=AliasChoices("tool_name", "toolName"))
    config: dict[str, Any] = Field(default_factory=dict)


class ConditionOperator(str, Enum):
    """Predicate applied by a condition node to its input."""

    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    EQUALS = "equals"
    REGEX = "regex"
    MIN_LENGTH = "min_length"


class ConditionNodeData(NodeData):
    condition: str = "true"
    operator: ConditionOperator = ConditionOperator.CONTAINS
    case_sensitive: bool = Field(
        default=False, validation_alias=AliasChoices("case_sensitive", "caseSensitive")
    )


class MergeNodeData(NodeData):
    separator: str = MERGE_SEPARATOR


class OutputNodeData(NodeData):
    pass


class PromptNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: Literal["prompt"] = "prompt"
    data: PromptNodeData = Field(default_factory=PromptNodeData)


class LLMNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: Literal["llm"] = "llm"
    data: LLMNodeData = Field(default_factory=LLMNodeData)


class ToolNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: Literal["tool"] = "tool"
    data: ToolNodeData


class ConditionNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: Literal["condition"] = "condition"
    data: ConditionNodeData = Field(default_factory=ConditionNodeData)


class MergeNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: Literal["merge"] = "merge"
    data: MergeNodeData = Field(default_factory=MergeNodeData)


class OutputNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: Literal["output"] = "output"
    data: OutputNodeData = Field(default_factory=OutputNodeData)


ChainNode = Annotated[
    Union[PromptNode, LLMNode, ToolNode, ConditionNode, MergeNode, OutputNode],
    Field(discriminator="type"),
]

NODE_TYPES = ("prompt", "llm", "tool", "condition", "merge", "output")


class GraphEdge(BaseModel):
    """Directed edge between two nodes.

    ``branch`` only matters for edges leaving a condition node when branch
    pruning is enabled: ``"true"``/``"false"`` select the branch the edge
    belongs to, any other value (or None) keeps the edge always active.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    branch: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("branch", "sourceHandle")
    )

    @field_validator("branch", mode="before")
    @classmethod
    def normalize_branch(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return "true" if value else "false"
        return value


class ChainGraph(BaseModel):
    """A validated chain graph.

    Node ids are unique and every edge references declared nodes. Cycles
    are detected when an execution plan is built, before any evaluation.

    Example:
        >>> graph = ChainGraph.from_dict({
        ...     "nodes": [
        ...         {"id": "p", "type": "prompt", "data": {"prompt": "summarize X"}},
        ...         {"id": "l", "type": "llm", "data": {}},
        ...     ],
        ...     "edges": [{"source": "p", "target": "l"}],
        ... })
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[ChainNode]
    edges: list[GraphEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_structure(self) -> "ChainGraph":
        """Reject empty graphs, duplicate node ids and dangling edges.

        Raises:
            InvalidGraphError: If the structure is malformed
        """
        if not self.nodes:
            raise InvalidGraphError("graph has no nodes")

        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise InvalidGraphError(f"duplicate node id '{node.id}'", node_id=node.id)
            seen.add(node.id)

        for edge in self.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in seen:
                    raise InvalidGraphError(
                        f"edge {edge.source} -> {edge.target} references unknown node "
                        f"'{endpoint}'",
                        node_id=endpoint,
                    )
        return self

    @classmethod
    def from_dict(cls, data: Any) -> "ChainGraph":
        """Parse a graph description.

        Accepts ``{"nodes": [...], "edges": [...]}`` or the same object
        wrapped as ``{"chain": {...}}``.

        Raises:
            InvalidGraphError: If the description cannot be parsed
        """
        if isinstance(data, dict) and "chain" in data and "nodes" not in data:
            data = data["chain"]
        if not isinstance(data, dict):
            raise InvalidGraphError("graph description must be an object")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise InvalidGraphError(f"{location}: {first.get('msg')}") from e

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def node(self, node_id: str) -> ChainNode:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)


class NodeOutput(BaseModel):
    """Output of one evaluated node.

    Attributes:
        text: Textual output consumed by downstream nodes
        generated_code: Code emitted by a code-generating tool
        condition_met: Predicate result (condition nodes only)
        branch: "true" or "false" (condition nodes only)
        metadata: Node-specific details (model id, cost, tool fields, ...)
    """

    text: str = ""
    generated_code: Optional[str] = None
    condition_met: Optional[bool] = None
    branch: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChainExecutionResult(BaseModel):
    """Result of executing a chain graph.

    On failure ``success`` is False, ``output`` is empty and the error
    fields describe the failure; no partial output is returned.
    """

    success: bool
    output: str = ""
    generated_code: Optional[str] = None
    nodes_executed: int = 0
    node_outputs: dict[str, NodeOutput] = Field(default_factory=dict)
    skipped_nodes: list[str] = Field(default_factory=list)
    total_cost: float = 0.0
    total_time_ms: float = 0.0
    error: Optional[str] = None
    error_code: Optional[str] = None
    failed_node_id: Optional[str] = None
    run_id: Optional[str] = None

    _exception: Optional[OrchestrationError] = PrivateAttr(default=None)

    @classmethod
    def failure(
        cls,
        error: OrchestrationError,
        total_time_ms: float = 0.0,
        failed_node_id: Optional[str] = None,
        run_id: Optional[str] = None,
    ) -> "ChainExecutionResult":
        result = cls(
            success=False,
            error=str(error),
            error_code=error.error_code,
            failed_node_id=failed_node_id,
            total_time_ms=total_time_ms,
            run_id=run_id,
        )
        result._exception = error
        return result

    @property
    def exception(self) -> Optional[OrchestrationError]:
        return self._exception

    def raise_for_error(self) -> None:
        """Raise the error of a failed run.

        Raises:
            OrchestrationError: The error that failed the run
        """
        if self._exception is not None:
            raise self._exception
