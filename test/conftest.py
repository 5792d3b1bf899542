from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping

import httpx
import pytest
from dotenv import load_dotenv

from mindloop_ai.agent_core.plugins.base import CommandPlugin, PluginHandler
from mindloop_ai.agent_core.plugins.builtin import AgentPlugin, DateTimePlugin, ShellPlugin
from mindloop_ai.agent_core.plugins.registry import PluginRegistry, PluginView
from mindloop_ai.agent_core.schemas.domain import AgentContext

TEST_ROOT = Path(__file__).resolve().parent
# test/.env first, then test/.env.example for defaults
load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)


class RecordingShell:
    """Stand-in for a real shell; returns ``output`` and records every script."""

    def __init__(self, output: str = "hi") -> None:
        self.output = output
        self.scripts: List[str] = []

    async def __call__(self, script: str) -> str:
        self.scripts.append(script)
        return self.output


class MemoryPlugin(CommandPlugin):
    """Non-mergeable plugin with an extra ``remember`` method."""

    name = "memory"
    description = "Remember notes between cycles."

    def __init__(self) -> None:
        super().__init__()
        self.notes: List[str] = []

    @property
    def methods(self) -> Mapping[str, PluginHandler]:
        return {"execute": self.execute, "remember": self.remember}

    def instructions(self) -> List[str]:
        return ["Remember something: [memory remember]the sky is blue[/memory]"]

    async def execute(self, content: str) -> str:
        return "\n".join(self.notes) or "Nothing remembered yet."

    async def remember(self, content: str) -> str:
        self.notes.append(content)
        return f"Remembered: {content}"


class BrokenPlugin(CommandPlugin):
    name = "broken"
    description = "Always fails."

    async def execute(self, content: str) -> str:
        raise RuntimeError("boom")


@pytest.fixture
def shell() -> RecordingShell:
    return RecordingShell()


@pytest.fixture
def registry(shell: RecordingShell) -> PluginRegistry:
    return PluginRegistry([DateTimePlugin(), AgentPlugin(), ShellPlugin(shell), MemoryPlugin()])


@pytest.fixture
def context() -> AgentContext:
    return AgentContext(system_prompt="You are a curious agent.")


@pytest.fixture
def view(registry: PluginRegistry, context: AgentContext) -> PluginView:
    return registry.bind(context)


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "/",  # relative paths used by the ASGI transport
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
