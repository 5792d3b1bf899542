from __future__ import annotations

"""Convenience factories for wiring the agent core.

Helpers to build the default plugin registry and a complete
``AgentRuntime`` (think-cycle plus scheduler) over either in-memory or SQL
repositories. The API server, the Celery worker and the tests all go
through these functions.
"""

from dataclasses import dataclass, replace
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from .engines.base import EngineRegistry, ModelEngine
from .plugins.builtin import AgentPlugin, DateTimePlugin, ShellExec, ShellPlugin
from .plugins.registry import PluginRegistry
from .repos.interfaces import ContextProvider, MessageRepository, OptionsStore
from .repos.memory import InMemoryMessageRepository, InMemoryOptionsStore, StaticContextProvider
from .repos.sql import build_sql_repos, create_all, create_engine, create_sessionmaker
from .runtime.cycle import ThinkCycle
from .runtime.models import CycleDeps, CycleSettings
from .scheduler.queue import CycleQueue, InMemoryCycleQueue
from .scheduler.service import CycleScheduler, SchedulerSettings
from .schemas.domain import AgentContext


@dataclass(frozen=True)
class AgentRuntime:
    """Everything needed to run and control the agent loop."""

    deps: CycleDeps
    cycle: ThinkCycle
    scheduler: CycleScheduler
    options: OptionsStore
    queue: CycleQueue
    db_engine: Optional[AsyncEngine] = None


def build_default_registry(*, shell_exec: Optional[ShellExec] = None) -> PluginRegistry:
    """Build the default ``PluginRegistry``.

    ``datetime`` and ``agent`` are always registered. ``shell`` is only
    registered when a ``shell_exec`` callable is supplied.
    """
    reg = PluginRegistry()
    reg.register(DateTimePlugin())
    reg.register(AgentPlugin())
    if shell_exec is not None:
        reg.register(ShellPlugin(shell_exec))
    return reg


def build_runtime(
    *,
    messages: MessageRepository,
    options: OptionsStore,
    contexts: ContextProvider,
    engines: EngineRegistry,
    queue: CycleQueue,
    plugins: Optional[PluginRegistry] = None,
    cycle_settings: Optional[CycleSettings] = None,
    scheduler_settings: Optional[SchedulerSettings] = None,
) -> AgentRuntime:
    """Wire repositories, plugins and engines into an ``AgentRuntime``.

    The scheduler becomes the controller of the ``agent`` plugin when one is
    registered.
    """
    plugins = plugins or build_default_registry()
    deps = CycleDeps(
        messages=messages,
        contexts=contexts,
        plugins=plugins,
        engines=engines,
        settings=cycle_settings or CycleSettings(),
    )
    cycle = ThinkCycle(deps)
    scheduler = CycleScheduler(options, cycle, queue, contexts=contexts, settings=scheduler_settings)
    if plugins.has(AgentPlugin.name):
        agent_plugin = plugins.get(AgentPlugin.name)
        if isinstance(agent_plugin, AgentPlugin) and agent_plugin.controller is None:
            agent_plugin.controller = scheduler
    return AgentRuntime(deps=deps, cycle=cycle, scheduler=scheduler, options=options, queue=queue)


def build_in_memory_runtime(
    *,
    engine: ModelEngine,
    context: Optional[AgentContext] = None,
    queue: Optional[CycleQueue] = None,
    plugins: Optional[PluginRegistry] = None,
    cycle_settings: Optional[CycleSettings] = None,
    scheduler_settings: Optional[SchedulerSettings] = None,
) -> AgentRuntime:
    """Runtime over in-memory repositories with ``engine`` registered for the context."""
    context = context or AgentContext()
    engines = EngineRegistry()
    engines.register(context.engine, engine)
    return build_runtime(
        messages=InMemoryMessageRepository(),
        options=InMemoryOptionsStore(),
        contexts=StaticContextProvider(context),
        engines=engines,
        queue=queue or InMemoryCycleQueue(),
        plugins=plugins,
        cycle_settings=cycle_settings,
        scheduler_settings=scheduler_settings,
    )


async def build_sql_runtime(
    database_url: str,
    *,
    engines: EngineRegistry,
    queue: CycleQueue,
    plugins: Optional[PluginRegistry] = None,
    cycle_settings: Optional[CycleSettings] = None,
    scheduler_settings: Optional[SchedulerSettings] = None,
    create_tables: bool = True,
) -> AgentRuntime:
    """Runtime over SQL repositories; creates the tables unless told otherwise."""
    db = create_engine(database_url)
    if create_tables:
        await create_all(db)
    repos = build_sql_repos(session_factory=create_sessionmaker(db))
    runtime = build_runtime(
        messages=repos.messages,
        options=repos.options,
        contexts=repos.contexts,
        engines=engines,
        queue=queue,
        plugins=plugins,
        cycle_settings=cycle_settings,
        scheduler_settings=scheduler_settings,
    )
    return replace(runtime, db_engine=db)
