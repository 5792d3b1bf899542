from __future__ import annotations

"""Model engine contract and registry.

An engine turns an ``EngineRequest`` (history, system prompt, memory, mood,
command catalog) into an ``EngineResponse``. Engines report provider
failures through ``EngineResponse.is_error`` instead of raising, so the
think-cycle can persist them as a visible system message.
"""

from typing import Dict, List, Protocol

from ..errors import EngineNotFound
from ..schemas.domain import EngineRequest, EngineResponse


class ModelEngine(Protocol):
    async def generate(self, request: EngineRequest) -> EngineResponse: ...


class EngineRegistry:
    """
    In-memory mapping of engine names to engine instances.

    Notes:
        - ``register`` overwrites any existing mapping for the name.
        - ``get`` will raise ``KeyError`` (``EngineNotFound``) if the engine is missing.
    """

    def __init__(self) -> None:
        self._engines: Dict[str, ModelEngine] = {}

    def register(self, name: str, engine: ModelEngine) -> None:
        self._engines[name] = engine

    def get(self, name: str) -> ModelEngine:
        try:
            return self._engines[name]
        except KeyError:
            raise EngineNotFound(name) from None

    def has(self, name: str) -> bool:
        return name in self._engines

    def names(self) -> List[str]:
        return list(self._engines)


def render_system_prompt(request: EngineRequest) -> str:
    """Combine system prompt, memory, mood and the command catalog into one text."""
    sections: List[str] = []
    if request.system_prompt.strip():
        sections.append(request.system_prompt.strip())
    if request.memory.strip():
        sections.append("MEMORY:\n" + request.memory.strip())
    sections.append(f"CURRENT MOOD: {request.mood:.2f} (0.0 = calm, 1.0 = excited)")
    if request.instructions.strip():
        sections.append(request.instructions.strip())
    return "\n\n".join(sections)


def render_transcript(request: EngineRequest) -> str:
    return "\n\n".join(f"[{entry.role}]\n{entry.content}" for entry in request.history)
