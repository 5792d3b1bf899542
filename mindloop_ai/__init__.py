"""MindLoop-AI.

An autonomous agent that thinks in persisted cycles and acts through
bracketed commands embedded in its own output.

High-level architecture
-----------------------

- **Think-cycle**: one LangGraph run that binds the active context, asks a
  model engine for the next turn, runs any ``[plugin method]...[/plugin]``
  commands found in the reply and persists exactly one message.
- **Scheduler**: keeps at most one cycle in flight through a TTL lease in the
  options store and re-enqueues the next cycle on a Celery queue while the
  agent is active and looped.

Core subpackages
----------------

- ``mindloop_ai.agent_core``: command pipeline, plugins, engines, runtime,
  scheduler and repositories.
- ``mindloop_ai.core``: logging and monitoring.
- ``mindloop_ai.server``: FastAPI control surface.
"""
