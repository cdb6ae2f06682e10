"""Repositories persisting orchestration artifacts through a RecordStore."""

import uuid
from typing import TYPE_CHECKING, Optional

from modelweave.chains.models import ChainGraph
from modelweave.models import Request
from modelweave.storage.base import Record, RecordStore

if TYPE_CHECKING:
    from modelweave.strategies.models import MultiCallResult

CONVERSATIONS_TABLE = "conversations"
MESSAGES_TABLE = "messages"
CHAIN_GRAPHS_TABLE = "chain_graphs"


class ConversationLog:
    """Stores strategy runs as conversations with their messages.

    Example:
        >>> log = ConversationLog(InMemoryRecordStore())
        >>> conversation_id = await log.record(request, result)
        >>> messages = await log.messages(conversation_id)
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def record(self, request: Request, result: "MultiCallResult") -> str:
        """Persist one strategy run.

        The user turn(s) come from the request; the assistant turn is the
        run's best response, when there is one.

        Args:
            request: Request that was fanned out
            result: Strategy result

        Returns:
            Id of the stored conversation
        """
        strategy = result.strategy.value
        conversation = await self.store.insert(
            CONVERSATIONS_TABLE,
            {
                "session_id": result.run_id or str(uuid.uuid4()),
                "title": f"{strategy} LLM Request",
                "context": {
                    "strategy": strategy,
                    "models": [r.model_id for r in result.responses]
                    + [f.model_id for f in result.failures],
                    "parameters": {
                        "temperature": request.temperature,
                        "max_tokens": request.max_tokens,
                    },
                    "success": result.success,
                    "total_cost": result.total_cost,
                    "total_time_ms": result.total_time_ms,
                },
            },
        )
        conversation_id = conversation["id"]

        for message in request.to_messages():
            await self.store.insert(
                MESSAGES_TABLE,
                {
                    "conversation_id": conversation_id,
                    "role": message["role"],
                    "content": message["content"],
                    "message_type": "text",
                    "metadata": {"source": "user_input"},
                },
            )

        if result.best is not None:
            await self.store.insert(
                MESSAGES_TABLE,
                {
                    "conversation_id": conversation_id,
                    "role": "assistant",
                    "content": result.best.content,
                    "message_type": "text",
                    "metadata": {
                        "source": "llm_response",
                        "model": result.best.model_id,
                        "provider": result.best.provider_id,
                        "strategy": strategy,
                        "cost": result.best.cost,
                        "latency_ms": result.best.latency_ms,
                    },
                },
            )

        return conversation_id

    async def list_conversations(self, limit: Optional[int] = None) -> list[Record]:
        return await self.store.select(CONVERSATIONS_TABLE, limit=limit)

    async def messages(self, conversation_id: str) -> list[Record]:
        return await self.store.select(MESSAGES_TABLE, {"conversation_id": conversation_id})


class ChainGraphRepository:
    """Saves and loads chain graph descriptions."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def save(
        self, name: str, graph: ChainGraph, description: Optional[str] = None
    ) -> Record:
        """Save a graph under a name.

        Args:
            name: Display name of the graph
            graph: Validated chain graph
            description: Optional free-text description

        Returns:
            Stored record (``id``, ``name``, ``description``, ``graph``, ``created_at``)
        """
        return await self.store.insert(
            CHAIN_GRAPHS_TABLE,
            {"name": name, "description": description, "graph": graph.to_dict()},
        )

    async def list_graphs(self, limit: Optional[int] = None) -> list[Record]:
        return await self.store.select(CHAIN_GRAPHS_TABLE, limit=limit)

    async def get(self, graph_id: str) -> Optional[ChainGraph]:
        """Load a saved graph by id.

        Returns:
            Parsed graph, or None if no record has that id
        """
        records = await self.store.select(CHAIN_GRAPHS_TABLE, {"id": graph_id}, limit=1)
        if not records:
            return None
        return ChainGraph.from_dict(records[0]["graph"])

    async def get_by_name(self, name: str) -> Optional[ChainGraph]:
        """Load the most recently saved graph with a name."""
        records = await self.store.select(CHAIN_GRAPHS_TABLE, {"name": name})
        if not records:
            return None
        return ChainGraph.from_dict(records[-1]["graph"])
