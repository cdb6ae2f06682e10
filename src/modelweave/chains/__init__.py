"""Chain graphs: typed node DAGs executed through the router."""

from modelweave.chains.executor import ChainExecutor, evaluate_condition
from modelweave.chains.models import (
    MERGE_SEPARATOR,
    NODE_TYPES,
    ChainExecutionResult,
    ChainGraph,
    ChainNode,
    ConditionNode,
    ConditionNodeData,
    ConditionOperator,
    GraphEdge,
    LLMNode,
    LLMNodeData,
    MergeNode,
    MergeNodeData,
    NodeOutput,
    OutputNode,
    PromptNode,
    PromptNodeData,
    ToolNode,
    ToolNodeData,
)
from modelweave.chains.tools import (
    ChainTool,
    ChainToolRegistry,
    CodeGeneratorTool,
    SearchTool,
    TemplateTool,
    default_tool_registry,
)
from modelweave.chains.validation import ExecutionPlan, build_plan, validate_graph

__all__ = [
    "MERGE_SEPARATOR",
    "NODE_TYPES",
    "ChainExecutionResult",
    "ChainExecutor",
    "ChainGraph",
    "ChainNode",
    "ChainTool",
    "ChainToolRegistry",
    "CodeGeneratorTool",
    "ConditionNode",
    "ConditionNodeData",
    "ConditionOperator",
    "ExecutionPlan",
    "GraphEdge",
    "LLMNode",
    "LLMNodeData",
    "MergeNode",
    "MergeNodeData",
    "NodeOutput",
    "OutputNode",
    "PromptNode",
    "PromptNodeData",
    "SearchTool",
    "TemplateTool",
    "ToolNode",
    "ToolNodeData",
    "build_plan",
    "default_tool_registry",
    "evaluate_condition",
    "validate_graph",
]
