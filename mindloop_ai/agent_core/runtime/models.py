from __future__ import annotations

"""Think-cycle settings, dependency bundle and LangGraph state.

- ``CycleSettings`` holds the text conventions of a cycle (reply marker,
  thinking prefix, history instructions). Field aliases match the
  environment variable names so ``Settings.cycle`` can build it directly.
- ``CycleDeps`` collects the repositories and registries the cycle needs.
- ``_CycleState`` is the state passed between LangGraph nodes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from ..engines.base import EngineRegistry
from ..plugins.registry import PluginRegistry, PluginView
from ..repos.interfaces import ContextProvider, MessageRepository
from ..schemas.domain import ActionsOutcome, AgentContext, AgentMode, EngineResponse, HistoryEntry, Message

DEFAULT_START_INSTRUCTION = "[Start your first thinking cycle]"
DEFAULT_CONTINUE_INSTRUCTION = "[Continue your thinking cycle]"


class CycleSettings(BaseModel):
    """Text conventions applied to every cycle."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    reply_marker: str = Field(default="[reply]", alias="MINDLOOP_REPLY_MARKER")
    thinking_prefix: str = Field(default="[thinking] ", alias="MINDLOOP_THINKING_PREFIX")
    start_instruction: str = Field(default=DEFAULT_START_INSTRUCTION, alias="MINDLOOP_CYCLE_START_INSTRUCTION")
    continue_instruction: str = Field(
        default=DEFAULT_CONTINUE_INSTRUCTION, alias="MINDLOOP_CYCLE_CONTINUE_INSTRUCTION"
    )


@dataclass(frozen=True)
class CycleDeps:
    """Dependency bundle for ``ThinkCycle``.

    Typically built by ``mindloop_ai.agent_core.factory`` and shared by the
    scheduler and the API.
    """

    messages: MessageRepository
    contexts: ContextProvider
    plugins: PluginRegistry
    engines: EngineRegistry
    settings: CycleSettings = field(default_factory=CycleSettings)


class _CycleState(TypedDict, total=False):
    """LangGraph state for a single think-cycle.

    ``mode`` is set on entry; each node adds the keys it produces.
    """

    mode: AgentMode
    context: AgentContext
    view: PluginView
    history: List[HistoryEntry]
    response: EngineResponse
    outcome: ActionsOutcome
    message: Optional[Message]
