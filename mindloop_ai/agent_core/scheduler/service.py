from __future__ import annotations

"""Cycle scheduler.

States: idle (lease free) -> running (lease held) -> idle.

- ``start`` enqueues one cycle when the agent is active, looped and idle.
- ``stop`` clears the lease; an in-flight cycle still runs to completion, but
  nothing is scheduled after it.
- ``process_thinking_cycle`` is the queue job body: take the lease, run one
  think-cycle, schedule the next cycle on success, release the lease in a
  ``finally``.

All state lives in the options store so that cycles picked up by different
worker processes never overlap.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import LeaseError
from ..repos.interfaces import ContextProvider, OptionsStore
from ..runtime.cycle import ThinkCycle
from ..schemas.domain import AgentMode, Message, SchedulerStatus
from .lease import DEFAULT_LEASE_TTL_SECONDS, CycleLease, new_owner_id
from .queue import DEFAULT_QUEUE_NAME, CycleQueue

logger = logging.getLogger(__name__)

ACTIVE_KEY = "active"
MODE_KEY = "mode"
INTER_CYCLE_DELAY_KEY = "inter_cycle_delay_seconds"


class SchedulerSettings(BaseModel):
    """Scheduler defaults; aliases match the environment variable names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    inter_cycle_delay_seconds: int = Field(default=15, ge=0, alias="MINDLOOP_INTER_CYCLE_DELAY_SECONDS")
    lease_ttl_seconds: int = Field(default=DEFAULT_LEASE_TTL_SECONDS, gt=0, alias="MINDLOOP_LEASE_TTL_SECONDS")
    queue_name: str = Field(default=DEFAULT_QUEUE_NAME, alias="MINDLOOP_CYCLE_QUEUE")


class CycleScheduler:
    """Single-flight driver of the think-cycle loop.

    Also serves as the ``AgentController`` of the ``agent`` plugin
    (``pause``/``resume``/``status``).
    """

    def __init__(
        self,
        options: OptionsStore,
        cycle: ThinkCycle,
        queue: CycleQueue,
        *,
        contexts: Optional[ContextProvider] = None,
        settings: Optional[SchedulerSettings] = None,
        lease: Optional[CycleLease] = None,
    ) -> None:
        self._options = options
        self._cycle = cycle
        self._queue = queue
        self._contexts = contexts
        self.settings = settings or SchedulerSettings()
        self.lease = lease or CycleLease(options, ttl_seconds=self.settings.lease_ttl_seconds)

    async def is_active(self) -> bool:
        return bool(await self._options.get(ACTIVE_KEY, False))

    async def mode(self) -> AgentMode:
        raw = await self._options.get(MODE_KEY, AgentMode.looped.value)
        try:
            return AgentMode(raw)
        except ValueError:
            logger.warning("Unknown agent mode %r in options; using looped", raw)
            return AgentMode.looped

    async def is_locked(self) -> bool:
        return await self.lease.is_locked()

    async def inter_cycle_delay(self) -> int:
        delay = await self._options.get(INTER_CYCLE_DELAY_KEY)
        if delay is None and self._contexts is not None:
            delay = (await self._contexts.get_active()).loop_interval_seconds
        if delay is None:
            delay = self.settings.inter_cycle_delay_seconds
        return max(0, int(delay))

    async def can_start(self) -> bool:
        return await self.is_active() and await self.mode() == AgentMode.looped and not await self.is_locked()

    async def start(self) -> bool:
        if not await self.can_start():
            logger.info("Cannot start thinking cycles - conditions not met")
            return False
        logger.info("Starting agent thinking process")
        await self._queue.enqueue(0)
        return True

    async def can_stop(self) -> bool:
        return await self.is_locked()

    async def stop(self) -> bool:
        if not await self.can_stop():
            logger.info("Cannot stop - no cycle is running")
            return False
        logger.info("Stopping agent thinking process")
        await self.lease.release()
        return True

    async def process_thinking_cycle(self) -> Optional[Message]:
        """
        Queue job body: run at most one think-cycle.

        Returns:
            The persisted message, or None when the job was skipped.

        Raises:
            Exception: Whatever the cycle raised, after the lease was released.
        """
        mode = await self.mode()
        if not await self.is_active() or mode == AgentMode.single:
            logger.info("Agent inactive or in single mode; clearing lease")
            await self.lease.clear()
            return None

        if await self.is_locked():
            logger.info("Skipped thinking cycle due to active lease")
            return None

        owner = new_owner_id()
        if not await self.lease.acquire(owner):
            logger.info("Skipped thinking cycle; lease taken by another worker")
            return None

        try:
            logger.info("Starting thinking cycle (owner=%s)", owner)
            message = await self._cycle.think(mode)
            logger.info("Thinking cycle completed (message_id=%s, role=%s)", message.id, message.role.value)
            await self._schedule_next(owner)
            return message
        except Exception:
            logger.exception("Thinking cycle failed")
            raise
        finally:
            try:
                await self.lease.release(owner)
            except LeaseError as e:
                logger.warning("Lease not released: %s", e)

    async def _schedule_next(self, owner: str) -> None:
        state = await self.lease.state()
        if not state.locked or state.owner != owner:
            logger.info("Lease of %s was released during the cycle; not scheduling the next one", owner)
            return
        if await self.is_active() and await self.mode() == AgentMode.looped:
            await self._queue.enqueue(await self.inter_cycle_delay())

    async def status(self) -> SchedulerStatus:
        state = await self.lease.state()
        return SchedulerStatus(
            active=await self.is_active(),
            mode=await self.mode(),
            locked=state.locked,
            lock_owner=state.owner if state.locked else None,
            lock_expires_at=state.expires_at if state.locked else None,
            can_start=await self.can_start(),
            can_stop=await self.can_stop(),
            inter_cycle_delay_seconds=await self.inter_cycle_delay(),
        )

    async def update_settings(
        self,
        *,
        active: Optional[bool] = None,
        mode: Optional[AgentMode] = None,
        inter_cycle_delay_seconds: Optional[int] = None,
    ) -> SchedulerStatus:
        """Persist settings and start or stop on an ``active`` edge."""
        was_active = await self.is_active()
        if mode is not None:
            await self._options.set(MODE_KEY, AgentMode(mode).value)
        if inter_cycle_delay_seconds is not None:
            await self._options.set(INTER_CYCLE_DELAY_KEY, int(inter_cycle_delay_seconds))
        if active is not None:
            await self._options.set(ACTIVE_KEY, bool(active))
            logger.info("Agent settings updated (active=%s, was_active=%s)", active, was_active)
            if active and not was_active:
                await self.start()
            elif not active and was_active:
                await self.stop()
        return await self.status()

    async def pause(self) -> bool:
        if not await self.is_active():
            return False
        await self._options.set(ACTIVE_KEY, False)
        logger.info("Agent thinking cycles paused")
        return True

    async def resume(self) -> bool:
        if await self.is_active():
            return False
        await self._options.set(ACTIVE_KEY, True)
        logger.info("Agent thinking cycles resumed")
        await self.start()
        return True
