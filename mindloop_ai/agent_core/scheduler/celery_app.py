"""Celery application and the thinking-cycle task.

Start a worker with::

    celery -A mindloop_ai.agent_core.scheduler.celery_app worker -Q ai

Each task runs exactly one ``CycleScheduler.process_thinking_cycle`` in a
fresh event loop with its own runtime and connection pool.
"""

import asyncio
import logging
from typing import Optional

from celery import Celery, shared_task
from celery.signals import worker_process_init

from mindloop_ai.core.logging_config import setup_logging
from mindloop_ai.server.core.config import settings

logger = logging.getLogger(__name__)

app = Celery("mindloop_ai")
app.conf.update(
    broker_url=settings.celery.broker_url,
    result_backend=settings.celery.result_backend,
    task_default_queue=settings.celery.queue,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

_tables_ready = False


async def _build_runtime():
    global _tables_ready
    from mindloop_ai.agent_core.engines import EngineRegistry, PydanticAIEngine
    from mindloop_ai.agent_core.factory import build_sql_runtime
    from mindloop_ai.agent_core.scheduler.queue import CeleryCycleQueue

    engines = EngineRegistry()
    engines.register("default", PydanticAIEngine(settings.default_model, timeout=settings.engine_timeout_seconds))
    runtime = await build_sql_runtime(
        settings.database_url,
        engines=engines,
        queue=CeleryCycleQueue(process_thinking_cycle_task, queue=settings.celery.queue),
        cycle_settings=settings.cycle,
        scheduler_settings=settings.scheduler,
        create_tables=not _tables_ready,
    )
    _tables_ready = True
    return runtime


async def _process_thinking_cycle() -> Optional[str]:
    # The connection pool is bound to this task's event loop.
    runtime = await _build_runtime()
    try:
        message = await runtime.scheduler.process_thinking_cycle()
    finally:
        if runtime.db_engine is not None:
            await runtime.db_engine.dispose()
    if message is None:
        logger.info("Thinking cycle task finished without running a cycle")
        return None
    return message.id


@worker_process_init.connect
def _worker_process_init(**_):
    setup_logging()


@shared_task(name="mindloop_ai.process_thinking_cycle")
def process_thinking_cycle_task() -> Optional[str]:
    """Run one thinking cycle; returns the persisted message id when a cycle ran."""
    return asyncio.run(_process_thinking_cycle())
