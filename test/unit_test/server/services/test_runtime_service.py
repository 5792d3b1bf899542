import pytest

from mindloop_ai.agent_core.engines import ScriptedEngine
from mindloop_ai.agent_core.factory import build_in_memory_runtime
from mindloop_ai.server.services import runtime as runtime_service


def test_get_runtime_before_init():
    runtime_service.set_runtime(None)
    with pytest.raises(RuntimeError, match="not initialized"):
        runtime_service.get_runtime()


def test_accessors_follow_installed_runtime():
    rt = build_in_memory_runtime(engine=ScriptedEngine())
    runtime_service.set_runtime(rt)
    try:
        assert runtime_service.get_scheduler() is rt.scheduler
        assert runtime_service.get_cycle() is rt.cycle
        assert runtime_service.get_messages() is rt.deps.messages
    finally:
        runtime_service.set_runtime(None)


@pytest.mark.asyncio
async def test_shutdown_without_runtime():
    runtime_service.set_runtime(None)
    await runtime_service.shutdown_runtime()
    with pytest.raises(RuntimeError):
        runtime_service.get_runtime()
