"""Think-cycle runtime: history shaping, the unified actions path and the LangGraph cycle."""

from .actions import AgentActions, format_syntax_errors
from .cycle import ThinkCycle
from .history import shape_cycle_history
from .models import CycleDeps, CycleSettings

__all__ = [
    "AgentActions",
    "CycleDeps",
    "CycleSettings",
    "ThinkCycle",
    "format_syntax_errors",
    "shape_cycle_history",
]
