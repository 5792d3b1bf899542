from __future__ import annotations

import pytest

from mindloop_ai.agent_core.repos.memory import (
    InMemoryMessageRepository,
    InMemoryOptionsStore,
    StaticContextProvider,
)
from mindloop_ai.agent_core.schemas.domain import AgentContext, Message, MessageRole

pytestmark = pytest.mark.asyncio


async def test_recent_is_oldest_first_and_skips_system() -> None:
    repo = InMemoryMessageRepository()
    for i, role in enumerate([MessageRole.user, MessageRole.system, MessageRole.thinking, MessageRole.command]):
        await repo.create(Message(role=role, content=str(i)))

    assert [m.content for m in await repo.recent(2)] == ["2", "3"]
    assert [m.content for m in await repo.recent(10)] == ["0", "2", "3"]
    assert [m.content for m in await repo.list(10)] == ["0", "1", "2", "3"]
    assert await repo.recent(0) == []


async def test_options_store_copies_values() -> None:
    store = InMemoryOptionsStore({"a": 1})
    value = {"nested": [1]}
    await store.set("doc", value)
    value["nested"].append(2)

    assert await store.get("doc") == {"nested": [1]}
    assert await store.get("a") == 1
    assert await store.get("missing", "fallback") == "fallback"

    await store.delete("a")
    await store.delete("a")
    assert await store.get("a") is None


async def test_static_context_provider() -> None:
    provider = StaticContextProvider()
    assert (await provider.get_active()).name == "default"

    ctx = AgentContext(name="night-shift")
    await provider.set_active(ctx)
    assert await provider.get_active() is ctx
