from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mindloop_ai.agent_core.engines import ScriptedEngine
from mindloop_ai.agent_core.factory import AgentRuntime, build_default_registry, build_in_memory_runtime
from mindloop_ai.agent_core.scheduler.queue import InMemoryCycleQueue
from mindloop_ai.server.main import app
from mindloop_ai.server.services.runtime import set_runtime


@pytest.fixture
def agent_runtime() -> AgentRuntime:
    return build_in_memory_runtime(
        engine=ScriptedEngine(["[thinking] quiet"]),
        plugins=build_default_registry(),
        queue=InMemoryCycleQueue(),
    )


@pytest_asyncio.fixture
async def client(agent_runtime: AgentRuntime) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with an in-memory runtime installed."""
    set_runtime(agent_runtime)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as ac:
            yield ac
    finally:
        set_runtime(None)
