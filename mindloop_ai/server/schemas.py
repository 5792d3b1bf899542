"""
API Schemas.

Pydantic models used for API request bodies and responses of the agent
control surface.
"""

from typing import Optional

from pydantic import BaseModel, Field

from mindloop_ai.agent_core.schemas.domain import AgentMode, SchedulerStatus


class AgentSettingsUpdate(BaseModel):
    """
    Schema for updating the scheduler settings.

    Omitted fields keep their stored value. Switching ``active`` on starts the
    loop; switching it off stops it.
    """

    active: Optional[bool] = Field(default=None, description="Whether thinking cycles should run.")
    mode: Optional[AgentMode] = Field(
        default=None,
        description="'looped' re-enqueues cycles; 'single' runs none from the queue.",
        examples=["looped"],
    )
    inter_cycle_delay_seconds: Optional[int] = Field(
        default=None, ge=0, description="Delay before the next cycle is picked up."
    )


class UserMessageCreate(BaseModel):
    """Text submitted by a user; commands inside it are executed."""

    content: str = Field(..., min_length=1, examples=["What time is it? [datetime][/datetime]"])


class ControlResponse(BaseModel):
    """Outcome of a start/stop request together with the resulting status."""

    accepted: bool = Field(..., description="False when the request was a no-op.")
    status: SchedulerStatus
