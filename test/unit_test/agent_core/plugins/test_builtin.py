from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

import pytest

from mindloop_ai.agent_core.errors import MethodNotFound
from mindloop_ai.agent_core.plugins.builtin import AgentPlugin, DateTimePlugin, ShellPlugin
from mindloop_ai.agent_core.schemas.domain import AgentMode, SchedulerStatus


@dataclass
class _Controller:
    active: bool = True
    locked: bool = False
    calls: list = field(default_factory=list)

    async def pause(self) -> bool:
        self.calls.append("pause")
        if not self.active:
            return False
        self.active = False
        return True

    async def resume(self) -> bool:
        self.calls.append("resume")
        if self.active:
            return False
        self.active = True
        return True

    async def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            active=self.active,
            mode=AgentMode.looped,
            locked=self.locked,
            can_start=False,
            can_stop=self.locked,
            inter_cycle_delay_seconds=15,
        )


class TestDateTimePlugin:
    @pytest.mark.asyncio
    async def test_now(self) -> None:
        out = await DateTimePlugin().call_method("now", "")
        assert re.fullmatch(r"Current date and time: \d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", out)

    @pytest.mark.asyncio
    async def test_format(self) -> None:
        out = await DateTimePlugin().call_method("format", "%Y")
        assert out == f"Formatted time: {datetime.now().year}"

    @pytest.mark.asyncio
    async def test_timestamp(self) -> None:
        out = await DateTimePlugin().call_method("timestamp", "")
        assert re.fullmatch(r"Current timestamp: \d+", out)

    @pytest.mark.asyncio
    async def test_undeclared_method(self) -> None:
        with pytest.raises(MethodNotFound):
            await DateTimePlugin().call_method("__init__", "")

    def test_methods_are_closed(self) -> None:
        assert DateTimePlugin().available_methods() == ["execute", "now", "format", "timestamp"]


class TestAgentPlugin:
    @pytest.mark.asyncio
    async def test_pause_then_already_paused(self) -> None:
        plugin = AgentPlugin(_Controller())
        assert await plugin.pause("") == "Agent thinking cycles paused."
        assert await plugin.pause("") == "Agent is already paused."

    @pytest.mark.asyncio
    async def test_pause_with_reason(self) -> None:
        plugin = AgentPlugin(_Controller())
        assert await plugin.pause(" tired ") == "Agent thinking cycles paused. Reason: tired"

    @pytest.mark.asyncio
    async def test_resume(self) -> None:
        plugin = AgentPlugin(_Controller(active=False))
        assert await plugin.resume("") == "Agent thinking cycles resumed."
        assert await plugin.resume("") == "Agent is already active."

    @pytest.mark.asyncio
    async def test_pause_not_allowed(self) -> None:
        controller = _Controller()
        plugin = AgentPlugin(controller, config={"allow_pause": False})

        assert await plugin.pause("") == "Error: Agent pause is not allowed in current configuration."
        assert controller.calls == []

    @pytest.mark.asyncio
    async def test_reason_required(self) -> None:
        plugin = AgentPlugin(_Controller(), config={"require_reason": True})
        assert await plugin.pause("") == "Error: Reason required for pause action."

    @pytest.mark.asyncio
    async def test_status(self) -> None:
        plugin = AgentPlugin(_Controller(locked=True))
        assert await plugin.status("") == (
            "Agent status: ACTIVE (currently thinking) [mode: looped] | can pause, can resume"
        )

    @pytest.mark.asyncio
    async def test_speak_sets_meta(self) -> None:
        plugin = AgentPlugin()
        assert await plugin.speak("Hello!") == "The user will see your message."
        assert plugin.execution_meta == {"speak": "Hello!"}

    @pytest.mark.asyncio
    async def test_controller_required(self) -> None:
        with pytest.raises(RuntimeError):
            await AgentPlugin().pause("")

    def test_self_closing_methods(self) -> None:
        assert AgentPlugin.self_closing_methods == ("pause", "resume", "status")


class TestShellPlugin:
    @pytest.mark.asyncio
    async def test_passes_content_to_shell(self, shell) -> None:
        assert await ShellPlugin(shell).execute("echo hi") == "hi"
        assert shell.scripts == ["echo hi"]

    @pytest.mark.asyncio
    async def test_empty_command(self, shell) -> None:
        assert await ShellPlugin(shell).execute("   ") == "Error: Empty command"
        assert shell.scripts == []

    def test_is_mergeable(self, shell) -> None:
        plugin = ShellPlugin(shell)
        assert plugin.mergeable
        assert plugin.merge_separator == "\n"
