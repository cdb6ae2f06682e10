"""Chain graph executor.

Executes a validated DAG level by level. Every node is evaluated at most
once and sees the outputs of all of its predecessors; nodes on the same
level do not depend on each other and run concurrently. Node outputs are
stored in a list addressed by node declaration index.

A node failure fails the whole run: no partial output is returned.
"""

import asyncio
import re
import time
from typing import Any, Awaitable, Callable, Optional, Union

from modelweave.chains.models import (
    MERGE_SEPARATOR,
    ChainExecutionResult,
    ChainGraph,
    ConditionNode,
    ConditionNodeData,
    ConditionOperator,
    LLMNode,
    MergeNode,
    NodeOutput,
    OutputNode,
    PromptNode,
    ToolNode,
)
from modelweave.chains.tools import ChainToolRegistry, default_tool_registry
from modelweave.chains.validation import ExecutionPlan, build_plan
from modelweave.errors import NodeExecutionError, OrchestrationError
from modelweave.models import Request
from modelweave.observability.logging import ensure_run_id, get_logger
from modelweave.observability.metrics import MetricsCollector, get_metrics_collector
from modelweave.routing.router import ModelRouter

logger = get_logger(__name__)

# Outputs of executed nodes by declaration index; None = not evaluated
Arena = list[Optional[NodeOutput]]
NodeHandler = Callable[[Any, list[NodeOutput]], Awaitable[NodeOutput]]


def evaluate_condition(data: ConditionNodeData, text: str) -> bool:
    """Apply a condition node's predicate to its input text.

    Raises:
        ValueError: If ``min_length`` is not an integer
        re.error: If ``regex`` is not a valid pattern
    """
    condition = data.condition
    subject = text
    if not data.case_sensitive and data.operator is not ConditionOperator.REGEX:
        condition = condition.lower()
        subject = subject.lower()

    if data.operator is ConditionOperator.CONTAINS:
        return condition in subject
    if data.operator is ConditionOperator.NOT_CONTAINS:
        return condition not in subject
    if data.operator is ConditionOperator.EQUALS:
        return subject.strip() == condition.strip()
    if data.operator is ConditionOperator.REGEX:
        flags = 0 if data.case_sensitive else re.IGNORECASE
        return re.search(data.condition, text, flags) is not None
    if data.operator is ConditionOperator.MIN_LENGTH:
        return len(text) >= int(data.condition)
    raise ValueError(f"unsupported operator '{data.operator}'")


class ChainExecutor:
    """Executes chain graphs through a ModelRouter.

    Example:
        >>> executor = ChainExecutor(router)
        >>> result = await executor.execute({
        ...     "nodes": [
        ...         {"id": "p1", "type": "prompt", "data": {"prompt": "summarize X"}},
        ...         {"id": "l1", "type": "llm", "data": {}},
        ...         {"id": "o1", "type": "output", "data": {}},
        ...     ],
        ...     "edges": [{"source": "p1", "target": "l1"}, {"source": "l1", "target": "o1"}],
        ... })
        >>> result.nodes_executed
        3
    """

    def __init__(
        self,
        router: ModelRouter,
        tools: Optional[ChainToolRegistry] = None,
        default_model: str = "gpt-4o-mini",
        default_max_tokens: int = 1000,
        default_temperature: float = 0.7,
        prune_condition_branches: bool = False,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            router: Router used by llm nodes
            tools: Tool registry for tool nodes (built-ins when omitted)
            default_model: Model for llm nodes that name none
            default_max_tokens: Completion budget for llm nodes that set none
            default_temperature: Temperature for llm nodes that set none
            prune_condition_branches: Skip nodes reachable only through the
                inactive branch of a condition node
            metrics: Metrics collector (defaults to the process-wide one)
        """
        self._router = router
        self._tools = tools or default_tool_registry()
        self._default_model = default_model
        self._default_max_tokens = default_max_tokens
        self._default_temperature = default_temperature
        self._prune = prune_condition_branches
        self._metrics = metrics or get_metrics_collector()
        self._handlers: dict[str, NodeHandler] = {
            "prompt": self._run_prompt,
            "llm": self._run_llm,
            "tool": self._run_tool,
            "condition": self._run_condition,
            "merge": self._run_merge,
            "output": self._run_output,
        }

    @property
    def tools(self) -> ChainToolRegistry:
        return self._tools

    async def execute(self, graph: Union[ChainGraph, dict[str, Any]]) -> ChainExecutionResult:
        """Validate and execute a graph.

        Never raises for graph or node failures; they are reported in the
        result.

        Args:
            graph: ChainGraph or graph description

        Returns:
            ChainExecutionResult
        """
        started = time.perf_counter()
        run_id = ensure_run_id()

        try:
            if not isinstance(graph, ChainGraph):
                graph = ChainGraph.from_dict(graph)
            plan = build_plan(graph)
        except OrchestrationError as e:
            logger.warning("chain_rejected", error_code=e.error_code, error=e.message)
            self._metrics.record_chain_run(success=False)
            return ChainExecutionResult.failure(e, _elapsed_ms(started), run_id=run_id)

        arena: Arena = [None] * len(plan.nodes)
        costs: list[float] = []
        skipped: list[str] = []

        for level in plan.levels:
            runnable = []
            for position in level:
                if self._is_active(plan, position, arena):
                    runnable.append(position)
                else:
                    skipped.append(plan.nodes[position].id)

            outcomes = await asyncio.gather(
                *(self._evaluate(plan, position, arena, costs) for position in runnable),
                return_exceptions=True,
            )

            for position, outcome in zip(runnable, outcomes):
                if isinstance(outcome, NodeExecutionError):
                    logger.warning(
                        "chain_failed", node_id=outcome.node_id, error=outcome.message
                    )
                    self._metrics.record_chain_run(success=False)
                    return ChainExecutionResult.failure(
                        outcome,
                        _elapsed_ms(started),
                        failed_node_id=outcome.node_id,
                        run_id=run_id,
                    )
                if isinstance(outcome, BaseException):
                    raise outcome
                arena[position] = outcome

        result = self._collect(plan, arena)
        result.skipped_nodes = skipped
        result.total_cost = sum(costs)
        result.total_time_ms = _elapsed_ms(started)
        result.run_id = run_id

        self._metrics.record_chain_run(success=True)
        logger.info(
            "chain_completed",
            nodes=len(plan.nodes),
            nodes_executed=result.nodes_executed,
            skipped=len(skipped),
            total_cost=result.total_cost,
            total_time_ms=round(result.total_time_ms, 1),
        )
        return result

    def _is_active(self, plan: ExecutionPlan, position: int, arena: Arena) -> bool:
        """Whether a node should run: it is a source or has an active incoming edge."""
        incoming = plan.incoming[position]
        return not incoming or any(self._edge_active(plan, e, arena) for e in incoming)

    def _edge_active(self, plan: ExecutionPlan, edge_index: int, arena: Arena) -> bool:
        source_output = arena[plan.sources[edge_index]]
        if source_output is None:
            return False
        if not self._prune:
            return True
        source = plan.nodes[plan.sources[edge_index]]
        branch = plan.edges[edge_index].branch
        if not isinstance(source, ConditionNode) or branch not in ("true", "false"):
            return True
        return branch == source_output.branch

    def _inputs(self, plan: ExecutionPlan, position: int, arena: Arena) -> list[NodeOutput]:
        """Outputs of the node's active predecessors, in edge declaration order."""
        inputs = []
        for edge_index in plan.incoming[position]:
            if self._edge_active(plan, edge_index, arena):
                output = arena[plan.sources[edge_index]]
                assert output is not None
                inputs.append(output)
        return inputs

    async def _evaluate(
        self, plan: ExecutionPlan, position: int, arena: Arena, costs: list[float]
    ) -> NodeOutput:
        node = plan.nodes[position]
        handler = self._handlers[node.type]
        try:
            output = await handler(node, self._inputs(plan, position, arena))
        except Exception as e:
            self._metrics.record_node_evaluation(node.type, success=False)
            raise NodeExecutionError(node.id, node.type, e) from e

        cost = output.metadata.get("cost")
        if cost:
            costs.append(cost)
        self._metrics.record_node_evaluation(node.type, success=True)
        logger.debug(
            "chain_node_evaluated", node_id=node.id, node_type=node.type, label=node.data.label
        )
        return output

    async def _run_prompt(self, node: PromptNode, inputs: list[NodeOutput]) -> NodeOutput:
        return NodeOutput(text=node.data.prompt)

    async def _run_llm(self, node: LLMNode, inputs: list[NodeOutput]) -> NodeOutput:
        data = node.data
        parts = [data.prompt] + [output.text for output in inputs]
        request = Request(
            prompt="\n\n".join(part for part in parts if part),
            system_prompt=data.system_prompt,
            temperature=(
                data.temperature if data.temperature is not None else self._default_temperature
            ),
            max_tokens=data.max_tokens or self._default_max_tokens,
        )
        result = await self._router.call(request, data.model or self._default_model)
        response = result.unwrap()
        return NodeOutput(
            text=response.content,
            metadata={
                "model_id": response.model_id,
                "provider_id": response.provider_id,
                "cost": response.cost,
                "latency_ms": response.latency_ms,
                "total_tokens": response.usage.total_tokens,
            },
        )

    async def _run_tool(self, node: ToolNode, inputs: list[NodeOutput]) -> NodeOutput:
        tool = self._tools.get(node.data.tool_name)
        return await tool.run(_first_text(inputs), dict(node.data.config))

    async def _run_condition(self, node: ConditionNode, inputs: list[NodeOutput]) -> NodeOutput:
        text = _first_text(inputs)
        met = evaluate_condition(node.data, text)
        return NodeOutput(text=text, condition_met=met, branch="true" if met else "false")

    async def _run_merge(self, node: MergeNode, inputs: list[NodeOutput]) -> NodeOutput:
        return NodeOutput(text=node.data.separator.join(o.text for o in inputs if o.text))

    async def _run_output(self, node: OutputNode, inputs: list[NodeOutput]) -> NodeOutput:
        generated_code = None
        for output in inputs:
            if output.generated_code:
                generated_code = output.generated_code
        return NodeOutput(
            text=MERGE_SEPARATOR.join(o.text for o in inputs if o.text),
            generated_code=generated_code,
        )

    def _collect(self, plan: ExecutionPlan, arena: Arena) -> ChainExecutionResult:
        """Build the final result from sink and output nodes, in declaration order."""
        texts: list[str] = []
        generated_code: Optional[str] = None
        for position, node in enumerate(plan.nodes):
            output = arena[position]
            if output is None:
                continue
            if plan.is_sink(position) or isinstance(node, OutputNode):
                if output.text:
                    texts.append(output.text.strip())
                if output.generated_code:
                    generated_code = output.generated_code

        return ChainExecutionResult(
            success=True,
            output="\n\n".join(texts).strip(),
            generated_code=generated_code,
            nodes_executed=sum(1 for output in arena if output is not None),
            node_outputs={
                plan.nodes[position].id: output
                for position, output in enumerate(arena)
                if output is not None
            },
        )


def _first_text(inputs: list[NodeOutput]) -> str:
    for output in inputs:
        if output.text:
            return output.text
    return ""


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
