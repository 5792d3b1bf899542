from __future__ import annotations

"""Delayed cycle queue.

Each think-cycle runs as its own queue job; a finished cycle schedules the
next one with a countdown instead of looping in-process.
"""

import logging
from typing import Any, List, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_NAME = "ai"


class CycleQueue(Protocol):
    async def enqueue(self, delay_seconds: int = 0) -> None: ...


class InMemoryCycleQueue:
    """Records enqueue calls; used in tests and single-process runs."""

    def __init__(self) -> None:
        self.calls: List[int] = []

    async def enqueue(self, delay_seconds: int = 0) -> None:
        self.calls.append(delay_seconds)


class CeleryCycleQueue:
    """Publishes ``process_thinking_cycle_task`` with a countdown."""

    def __init__(self, task: Optional[Any] = None, *, queue: str = DEFAULT_QUEUE_NAME) -> None:
        self._task = task
        self.queue = queue

    def _resolve_task(self) -> Any:
        if self._task is None:
            from .celery_app import process_thinking_cycle_task

            self._task = process_thinking_cycle_task
        return self._task

    async def enqueue(self, delay_seconds: int = 0) -> None:
        self._resolve_task().apply_async(countdown=max(0, int(delay_seconds)), queue=self.queue)
        logger.info("Enqueued thinking cycle on %s (countdown=%ss)", self.queue, delay_seconds)
