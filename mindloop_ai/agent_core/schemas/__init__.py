"""Pydantic schemas shared across the command pipeline, runtime and scheduler."""

from .base import BaseSchema, FrozenSchema
from .domain import (
    DEFAULT_METHOD,
    ActionsOutcome,
    AgentContext,
    AgentMode,
    CommandExecutionResult,
    CommandResult,
    EngineRequest,
    EngineResponse,
    HistoryEntry,
    InvocationSource,
    Message,
    MessageRole,
    ParsedCommand,
    SchedulerStatus,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "DEFAULT_METHOD",
    "ActionsOutcome",
    "AgentContext",
    "AgentMode",
    "CommandExecutionResult",
    "CommandResult",
    "EngineRequest",
    "EngineResponse",
    "HistoryEntry",
    "InvocationSource",
    "Message",
    "MessageRole",
    "ParsedCommand",
    "SchedulerStatus",
]
