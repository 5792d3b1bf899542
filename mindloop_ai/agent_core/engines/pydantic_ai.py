"""Engine adapter for the Pydantic AI framework.

Each ``generate`` call builds a ``pydantic_ai.Agent`` for the configured
model with the rendered system prompt and runs it on the history
transcript. Any failure (missing credentials, provider errors, timeouts)
is returned as an error response.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional

from mindloop_ai.core.logging_config import get_logger

from ..schemas.domain import EngineRequest, EngineResponse
from .base import render_system_prompt, render_transcript

logger = get_logger(__name__)

AgentFactory = Callable[[str, str], Any]


def _default_agent_factory(model: str, system_prompt: str) -> Any:
    from pydantic_ai import Agent

    return Agent(model, system_prompt=system_prompt)


class PydanticAIEngine:
    """Adapter from ``EngineRequest`` to a Pydantic AI agent run.

    Attributes:
        model: Pydantic AI model id, e.g. ``"openai:gpt-4o"``.
        timeout: Optional per-run timeout in seconds.
    """

    def __init__(
        self,
        model: str,
        *,
        timeout: Optional[float] = None,
        agent_factory: Optional[AgentFactory] = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self._agent_factory = agent_factory or _default_agent_factory

    async def generate(self, request: EngineRequest) -> EngineResponse:
        try:
            agent = self._agent_factory(self.model, render_system_prompt(request))
            prompt = render_transcript(request)
            logger.debug(f"Invoking Pydantic AI engine {self.model} with prompt length {len(prompt)}")
            if self.timeout is not None:
                result = await asyncio.wait_for(agent.run(prompt), self.timeout)
            else:
                result = await agent.run(prompt)

            output = getattr(result, "output", None)
            if output is None:
                output = getattr(result, "data", "")
            metadata: Dict[str, Any] = {"model": self.model, "framework": "pydantic_ai"}
            usage = getattr(result, "usage", None)
            if callable(usage):
                usage = usage()
            if usage is not None:
                metadata["usage"] = {
                    "input_tokens": getattr(usage, "input_tokens", None),
                    "output_tokens": getattr(usage, "output_tokens", None),
                }
            return EngineResponse(text=str(output or ""), metadata=metadata)
        except asyncio.TimeoutError:
            logger.error(f"Pydantic AI engine call timed out after {self.timeout}s for {self.model}")
            return EngineResponse(
                text=f"Engine error: timed out after {self.timeout} seconds",
                is_error=True,
                metadata={"model": self.model, "framework": "pydantic_ai", "error": "timeout"},
            )
        except Exception as e:
            logger.error(f"Pydantic AI engine call failed for {self.model}: {e}", exc_info=True)
            return EngineResponse(
                text=f"Engine error: {e}",
                is_error=True,
                metadata={"model": self.model, "framework": "pydantic_ai", "error": str(e)},
            )
