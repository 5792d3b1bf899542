from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field, computed_field, model_validator

from .base import BaseSchema, FrozenSchema

DEFAULT_METHOD = "execute"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    user = "user"
    thinking = "thinking"
    speaking = "speaking"
    command = "command"
    system = "system"


class AgentMode(str, Enum):
    single = "single"
    looped = "looped"


class InvocationSource(str, Enum):
    """Who produced the text being turned into actions."""

    cycle = "cycle"
    user = "user"


class ParsedCommand(FrozenSchema):
    """One ``[plugin method]content[/plugin]`` block extracted from model output."""

    plugin: str
    method: str = DEFAULT_METHOD
    content: str = ""
    position: int = 0


class CommandResult(FrozenSchema):
    """Outcome of dispatching a single ``ParsedCommand``."""

    command: ParsedCommand
    result: str = ""
    success: bool
    error: Optional[str] = None
    execution_meta: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_error_matches_success(self) -> "CommandResult":
        if self.success and self.error is not None:
            raise ValueError("successful command result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("failed command result requires an error message")
        return self


class CommandExecutionResult(FrozenSchema):
    """All results of one batch plus the formatted turn text."""

    results: List[CommandResult] = Field(default_factory=list)
    formatted_message: str = ""
    execution_meta: Dict[str, str] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_errors(self) -> bool:
        return any(not r.success for r in self.results)


class Message(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    role: MessageRole
    content: str
    context_id: Optional[str] = None
    is_visible_to_user: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)


class AgentContext(BaseSchema):
    """The active configuration bundle bound to plugins for one cycle."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = "default"
    engine: str = "default"
    system_prompt: str = ""
    disabled_plugins: List[str] = Field(default_factory=list)
    mood: float = 0.5
    memory: str = ""
    history_limit: int = Field(default=8, ge=0)
    loop_interval_seconds: int = Field(default=15, ge=0)
    plugin_config: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class HistoryEntry(FrozenSchema):
    role: str
    content: str


class EngineRequest(FrozenSchema):
    history: List[HistoryEntry] = Field(default_factory=list)
    system_prompt: str = ""
    memory: str = ""
    mood: float = Field(default=0.5, ge=0.0, le=1.0)
    instructions: str = ""


class EngineResponse(FrozenSchema):
    text: str = ""
    is_error: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ActionsOutcome(FrozenSchema):
    """Role, text and visibility decided for the message produced from one text."""

    role: MessageRole
    content: str
    is_visible_to_user: bool
    execution: Optional[CommandExecutionResult] = None
    syntax_errors: List[str] = Field(default_factory=list)


class SchedulerStatus(BaseSchema):
    active: bool
    mode: AgentMode
    locked: bool
    lock_owner: Optional[str] = None
    lock_expires_at: Optional[datetime] = None
    can_start: bool
    can_stop: bool
    inter_cycle_delay_seconds: int
