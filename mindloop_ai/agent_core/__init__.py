"""Agent core: the command pipeline, plugins, model engines and the think-cycle.

Design overview
---------------

Model output is treated as text that may contain command blocks. Each cycle:

1. Pre-processes the text (auto-closes self-closing commands, flattens
   nesting).
2. Validates it, collecting syntax errors and warnings for the model.
3. Parses and executes the commands through the enabled plugins.
4. Decides role and visibility of the one message it persists.

Typical usage
-------------

Most applications build an ``AgentRuntime`` through
``agent_core.factory`` and drive it via ``runtime.scheduler`` (looped mode)
or ``runtime.cycle.think()`` (single cycle).
"""

from .errors import (
    EngineNotFound,
    LeaseError,
    MethodNotFound,
    MindLoopError,
    PluginDisabled,
    PluginError,
    UnknownPlugin,
)
from .factory import (
    AgentRuntime,
    build_default_registry,
    build_in_memory_runtime,
    build_runtime,
    build_sql_runtime,
)

__all__ = [
    "AgentRuntime",
    "EngineNotFound",
    "LeaseError",
    "MethodNotFound",
    "MindLoopError",
    "PluginDisabled",
    "PluginError",
    "UnknownPlugin",
    "build_default_registry",
    "build_in_memory_runtime",
    "build_runtime",
    "build_sql_runtime",
]
