from __future__ import annotations

"""LangGraph think-cycle.

``ThinkCycle.think`` runs one pass of the agent loop and always persists
exactly one message.

Graph
-----

::

    bind_context -> generate -+-> persist_error -+-> persist -> END
                              +-> process -------+

- ``bind_context``: resolve the active context and bind the plugin registry.
- ``generate``: shape history, render the command catalog, call the engine.
- ``persist_error``: an engine error becomes a visible ``system`` message;
  the response text is not parsed.
- ``process``: pre-process, parse, validate and execute via ``AgentActions``.
- ``persist``: write the single message for the cycle.

Any exception raised by a node is caught once in ``think`` and persisted as a
visible ``system`` message ``Error in thinking process: <message>``.
"""

import logging
import time
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from mindloop_ai.core import monitoring

from ..commands.instructions import CommandInstructionBuilder
from ..plugins.registry import PluginView
from ..schemas.domain import (
    ActionsOutcome,
    AgentMode,
    EngineRequest,
    InvocationSource,
    Message,
    MessageRole,
)
from .actions import AgentActions
from .history import shape_cycle_history
from .models import CycleDeps, _CycleState

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error in thinking process: "


def _clamp_mood(mood: float) -> float:
    return max(0.0, min(1.0, float(mood)))


class ThinkCycle:
    def __init__(self, deps: CycleDeps) -> None:
        self._deps = deps
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_CycleState)
        g.add_node("bind_context", self._node_bind_context)
        g.add_node("generate", self._node_generate)
        g.add_node("persist_error", self._node_persist_error)
        g.add_node("process", self._node_process)
        g.add_node("persist", self._node_persist)

        g.set_entry_point("bind_context")
        g.add_edge("bind_context", "generate")
        g.add_conditional_edges(
            "generate",
            self._route_after_generate,
            {"error": "persist_error", "process": "process"},
        )
        g.add_edge("persist_error", "persist")
        g.add_edge("process", "persist")
        g.add_edge("persist", END)
        return g.compile()

    async def think(self, mode: AgentMode = AgentMode.looped) -> Message:
        """Run one cycle and return the message it persisted."""
        started = time.perf_counter()
        try:
            final = await self._graph.ainvoke({"mode": mode})
            message = final["message"]
        except Exception as e:
            logger.exception("Think cycle failed")
            monitoring.log_error("ThinkCycleError", str(e))
            message = await self._deps.messages.create(
                Message(
                    role=MessageRole.system,
                    content=f"{ERROR_PREFIX}{e}",
                    is_visible_to_user=True,
                    metadata={"error": type(e).__name__},
                )
            )
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info("Think cycle persisted %s message in %.1f ms", message.role.value, duration_ms)
        monitoring.log_cycle_completed(
            message.context_id or "",
            message.role.value,
            duration_ms,
            commands=int(message.metadata.get("commands", 0)),
        )
        return message

    async def submit_user_message(self, text: str) -> Message:
        """
        Persist user text through the same actions path as model output.

        Commands in the text are executed and the message becomes role
        ``command``; otherwise it is stored as a visible ``user`` message.
        """
        context = await self._deps.contexts.get_active()
        view = self._deps.plugins.bind(context)
        outcome = await AgentActions(view, self._deps.settings).run(text, source=InvocationSource.user)
        return await self._deps.messages.create(self._message_from(outcome, context.id, {"source": "user"}))

    async def _node_bind_context(self, state: _CycleState) -> Dict[str, Any]:
        context = await self._deps.contexts.get_active()
        view = self._deps.plugins.bind(context)
        monitoring.log_cycle_started(context.id, context.engine)
        logger.debug("Cycle bound to context %s (engine=%s)", context.id, context.engine)
        return {"context": context, "view": view}

    async def _node_generate(self, state: _CycleState) -> Dict[str, Any]:
        context = state["context"]
        view: PluginView = state["view"]
        engine = self._deps.engines.get(context.engine)

        recent = await self._deps.messages.recent(context.history_limit)
        history = shape_cycle_history(
            recent,
            start_instruction=self._deps.settings.start_instruction,
            continue_instruction=self._deps.settings.continue_instruction,
        )
        request = EngineRequest(
            history=history,
            system_prompt=context.system_prompt,
            memory=context.memory,
            mood=_clamp_mood(context.mood),
            instructions=CommandInstructionBuilder(view).build_instructions(),
        )
        response = await engine.generate(request)
        return {"history": history, "response": response}

    def _route_after_generate(self, state: _CycleState) -> str:
        return "error" if state["response"].is_error else "process"

    async def _node_persist_error(self, state: _CycleState) -> Dict[str, Any]:
        response = state["response"]
        logger.warning("Engine returned an error: %s", response.text)
        outcome = ActionsOutcome(role=MessageRole.system, content=response.text, is_visible_to_user=True)
        return {"outcome": outcome}

    async def _node_process(self, state: _CycleState) -> Dict[str, Any]:
        actions = AgentActions(state["view"], self._deps.settings)
        outcome = await actions.run(
            state["response"].text,
            source=InvocationSource.cycle,
            mode=state.get("mode", AgentMode.looped),
        )
        return {"outcome": outcome}

    async def _node_persist(self, state: _CycleState) -> Dict[str, Any]:
        metadata = dict(state["response"].metadata)
        if state["response"].is_error:
            metadata["engine_error"] = True
        message = self._message_from(state["outcome"], state["context"].id, metadata)
        await self._deps.messages.create(message)
        return {"message": message}

    @staticmethod
    def _message_from(outcome: ActionsOutcome, context_id: Optional[str], metadata: Dict[str, Any]) -> Message:
        metadata = dict(metadata)
        if outcome.execution is not None:
            metadata["commands"] = len(outcome.execution.results)
            metadata["has_errors"] = outcome.execution.has_errors
            if outcome.execution.execution_meta:
                metadata["execution_meta"] = dict(outcome.execution.execution_meta)
            if "speak" in outcome.execution.execution_meta:
                metadata["speak"] = outcome.execution.execution_meta["speak"]
        if outcome.syntax_errors:
            metadata["syntax_errors"] = list(outcome.syntax_errors)
        return Message(
            role=outcome.role,
            content=outcome.content,
            context_id=context_id,
            is_visible_to_user=outcome.is_visible_to_user,
            metadata=metadata,
        )
