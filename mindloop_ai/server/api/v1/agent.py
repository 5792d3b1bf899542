"""
Agent Control API Endpoints.

Start, stop and configure the think-cycle loop, inspect its status and
submit user messages.
"""

from typing import List

from fastapi import APIRouter, Query

from mindloop_ai.agent_core.schemas.domain import Message, SchedulerStatus
from mindloop_ai.core.logging_config import get_logger
from mindloop_ai.server.schemas import AgentSettingsUpdate, ControlResponse, UserMessageCreate
from mindloop_ai.server.services.deps import CycleDep, MessagesDep, SchedulerDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/status",
    response_model=SchedulerStatus,
    summary="Get Agent Status",
    description="Active flag, mode, lease state and whether the loop can be started or stopped.",
)
async def get_status(scheduler: SchedulerDep) -> SchedulerStatus:
    return await scheduler.status()


@router.post(
    "/start",
    response_model=ControlResponse,
    summary="Start Thinking Cycles",
    description="Enqueue one cycle when the agent is active, looped and idle.",
)
async def start(scheduler: SchedulerDep) -> ControlResponse:
    accepted = await scheduler.start()
    return ControlResponse(accepted=accepted, status=await scheduler.status())


@router.post(
    "/stop",
    response_model=ControlResponse,
    summary="Stop Thinking Cycles",
    description="Release the cycle lease. A cycle already in flight finishes but schedules nothing after it.",
)
async def stop(scheduler: SchedulerDep) -> ControlResponse:
    accepted = await scheduler.stop()
    return ControlResponse(accepted=accepted, status=await scheduler.status())


@router.put(
    "/settings",
    response_model=SchedulerStatus,
    summary="Update Agent Settings",
)
async def update_settings(body: AgentSettingsUpdate, scheduler: SchedulerDep) -> SchedulerStatus:
    """
    Update scheduler settings.

    Turning ``active`` on starts the loop; turning it off stops it.
    """
    logger.info(f"Updating agent settings: {body.model_dump(exclude_none=True)}")
    return await scheduler.update_settings(
        active=body.active,
        mode=body.mode,
        inter_cycle_delay_seconds=body.inter_cycle_delay_seconds,
    )


@router.post(
    "/messages",
    response_model=Message,
    status_code=201,
    summary="Submit User Message",
    description="Persist user text; commands inside it are executed and the message becomes a command result.",
)
async def submit_message(body: UserMessageCreate, cycle: CycleDep) -> Message:
    return await cycle.submit_user_message(body.content)


@router.get(
    "/messages",
    response_model=List[Message],
    summary="List Messages",
    description="Most recent messages, oldest first.",
)
async def list_messages(messages: MessagesDep, limit: int = Query(default=50, ge=1, le=500)) -> List[Message]:
    return await messages.list(limit)
