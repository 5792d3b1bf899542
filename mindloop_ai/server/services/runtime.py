"""
Agent Runtime Service.

Holds the process-wide ``AgentRuntime`` used by the API. The lifespan hook
builds it over the configured database with a Celery-backed cycle queue;
tests install their own with ``set_runtime`` or override the dependencies.
"""

from typing import Optional

from mindloop_ai.agent_core.engines import EngineRegistry, PydanticAIEngine
from mindloop_ai.agent_core.factory import AgentRuntime, build_sql_runtime
from mindloop_ai.agent_core.repos.interfaces import MessageRepository
from mindloop_ai.agent_core.runtime.cycle import ThinkCycle
from mindloop_ai.agent_core.scheduler.queue import CeleryCycleQueue
from mindloop_ai.agent_core.scheduler.service import CycleScheduler
from mindloop_ai.core.logging_config import get_logger
from mindloop_ai.server.core.config import settings

logger = get_logger(__name__)

_runtime: Optional[AgentRuntime] = None


async def init_runtime() -> AgentRuntime:
    """Build the SQL-backed runtime from settings and install it."""
    engines = EngineRegistry()
    engines.register("default", PydanticAIEngine(settings.default_model, timeout=settings.engine_timeout_seconds))
    runtime = await build_sql_runtime(
        settings.database_url,
        engines=engines,
        queue=CeleryCycleQueue(queue=settings.celery.queue),
        cycle_settings=settings.cycle,
        scheduler_settings=settings.scheduler,
    )
    set_runtime(runtime)
    logger.info("Agent runtime initialized")
    return runtime


async def shutdown_runtime() -> None:
    global _runtime
    if _runtime is not None and _runtime.db_engine is not None:
        await _runtime.db_engine.dispose()
    _runtime = None


def set_runtime(runtime: Optional[AgentRuntime]) -> None:
    global _runtime
    _runtime = runtime


def get_runtime() -> AgentRuntime:
    if _runtime is None:
        raise RuntimeError("Agent runtime is not initialized")
    return _runtime


def get_scheduler() -> CycleScheduler:
    return get_runtime().scheduler


def get_cycle() -> ThinkCycle:
    return get_runtime().cycle


def get_messages() -> MessageRepository:
    return get_runtime().deps.messages
