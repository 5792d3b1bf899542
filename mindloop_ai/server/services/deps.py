"""
Runtime Dependencies.

FastAPI dependency aliases for the scheduler, the think-cycle and the
message log. Tests override ``get_scheduler``/``get_cycle``/``get_messages``
via ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from mindloop_ai.agent_core.repos.interfaces import MessageRepository
from mindloop_ai.agent_core.runtime.cycle import ThinkCycle
from mindloop_ai.agent_core.scheduler.service import CycleScheduler
from mindloop_ai.server.services.runtime import get_cycle, get_messages, get_scheduler

SchedulerDep = Annotated[CycleScheduler, Depends(get_scheduler)]
CycleDep = Annotated[ThinkCycle, Depends(get_cycle)]
MessagesDep = Annotated[MessageRepository, Depends(get_messages)]
