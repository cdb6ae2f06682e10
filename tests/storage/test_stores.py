"""Tests for record stores and repositories."""

import pytest

from modelweave.chains.models import ChainGraph
from modelweave.storage.memory import InMemoryRecordStore
from modelweave.storage.repositories import ChainGraphRepository
from modelweave.storage.sql_store import SqlRecordStore

GRAPH = {
    "nodes": [
        {"id": "p", "type": "prompt", "data": {"prompt": "summarize X"}},
        {"id": "l", "type": "llm", "data": {"model": "m1"}},
    ],
    "edges": [{"source": "p", "target": "l"}],
}


@pytest.fixture
async def sql_store(tmp_path):
    store = SqlRecordStore.from_url(f"sqlite+aiosqlite:///{tmp_path}/records.db")
    await store.create_tables()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryRecordStore()
        return
    sql = SqlRecordStore.from_url(f"sqlite+aiosqlite:///{tmp_path}/param.db")
    await sql.create_tables()
    yield sql
    await sql.close()


class TestRecordStore:
    """Behavior shared by every RecordStore implementation."""

    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_timestamp(self, store) -> None:
        record = await store.insert("items", {"name": "a"})

        assert record["name"] == "a"
        assert record["id"]
        assert record["created_at"].endswith("+00:00")

    @pytest.mark.asyncio
    async def test_insert_keeps_given_id(self, store) -> None:
        record = await store.insert("items", {"id": "fixed", "name": "a"})

        assert record["id"] == "fixed"

    @pytest.mark.asyncio
    async def test_select_filters_and_preserves_order(self, store) -> None:
        for name, kind in [("a", "x"), ("b", "y"), ("c", "x")]:
            await store.insert("items", {"name": name, "kind": kind})
        await store.insert("other", {"name": "z", "kind": "x"})

        rows = await store.select("items", {"kind": "x"})

        assert [row["name"] for row in rows] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_select_limit(self, store) -> None:
        for name in "abc":
            await store.insert("items", {"name": name})

        rows = await store.select("items", limit=2)

        assert [row["name"] for row in rows] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_nested_values_survive(self, store) -> None:
        await store.insert("items", {"payload": {"list": [1, 2], "flag": True}})

        rows = await store.select("items")

        assert rows[0]["payload"] == {"list": [1, 2], "flag": True}

    @pytest.mark.asyncio
    async def test_empty_table(self, store) -> None:
        assert await store.select("nothing") == []


@pytest.mark.asyncio
async def test_memory_store_returns_copies() -> None:
    store = InMemoryRecordStore()
    record = await store.insert("items", {"tags": ["a"]})
    record["tags"].append("b")

    rows = await store.select("items")

    assert rows[0]["tags"] == ["a"]
    assert await store.count("items") == 1


@pytest.mark.asyncio
async def test_sql_store_health(sql_store: SqlRecordStore) -> None:
    assert await sql_store.database.health_check()


class TestChainGraphRepository:
    @pytest.mark.asyncio
    async def test_save_and_load(self, store) -> None:
        repository = ChainGraphRepository(store)
        graph = ChainGraph.from_dict(GRAPH)

        record = await repository.save("summarize", graph, description="Summarizes X")
        loaded = await repository.get(record["id"])

        assert loaded == graph
        assert record["name"] == "summarize"
        assert record["description"] == "Summarizes X"

    @pytest.mark.asyncio
    async def test_get_missing(self, store) -> None:
        assert await ChainGraphRepository(store).get("missing") is None

    @pytest.mark.asyncio
    async def test_get_by_name_returns_latest(self, store) -> None:
        repository = ChainGraphRepository(store)
        first = ChainGraph.from_dict(GRAPH)
        second = ChainGraph.from_dict({"nodes": [{"id": "only", "type": "prompt"}]})

        await repository.save("flow", first)
        await repository.save("flow", second)

        assert await repository.get_by_name("flow") == second
        assert await repository.get_by_name("nope") is None

    @pytest.mark.asyncio
    async def test_list_graphs(self, store) -> None:
        repository = ChainGraphRepository(store)
        for name in ("one", "two", "three"):
            await repository.save(name, ChainGraph.from_dict(GRAPH))

        records = await repository.list_graphs(limit=2)

        assert [record["name"] for record in records] == ["one", "two"]
