"""Model engines: the generation contract, its registry, and concrete adapters."""

from .base import EngineRegistry, ModelEngine, render_system_prompt, render_transcript
from .pydantic_ai import PydanticAIEngine
from .scripted import ScriptedEngine

__all__ = [
    "EngineRegistry",
    "ModelEngine",
    "PydanticAIEngine",
    "ScriptedEngine",
    "render_system_prompt",
    "render_transcript",
]
