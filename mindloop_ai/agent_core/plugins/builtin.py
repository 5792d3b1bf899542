from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol

from ..schemas.domain import SchedulerStatus
from .base import CommandPlugin, PluginHandler

logger = logging.getLogger(__name__)

_DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class DateTimePlugin(CommandPlugin):
    """Current date and time in a few formats."""

    name = "datetime"
    description = "Date and time operations with various formatting options."
    self_closing_methods = ("now", "timestamp")

    @property
    def methods(self) -> Mapping[str, PluginHandler]:
        return {
            "execute": self.execute,
            "now": self.now,
            "format": self.format,
            "timestamp": self.timestamp,
        }

    def instructions(self) -> List[str]:
        return [
            "Show current date and time: [datetime][/datetime]",
            "Show current date and time in some format: [datetime format]%d.%m.%Y %H:%M[/datetime]",
            "Get current timestamp: [datetime timestamp][/datetime]",
        ]

    async def execute(self, content: str) -> str:
        return await self.now(content)

    async def now(self, content: str) -> str:
        return "Current date and time: " + datetime.now().strftime(_DEFAULT_TIME_FORMAT)

    async def format(self, content: str) -> str:
        fmt = content.strip() or _DEFAULT_TIME_FORMAT
        return "Formatted time: " + datetime.now().strftime(fmt)

    async def timestamp(self, content: str) -> str:
        return f"Current timestamp: {int(time.time())}"


class AgentController(Protocol):
    """Lifecycle operations the ``agent`` plugin delegates to (the scheduler)."""

    async def pause(self) -> bool: ...

    async def resume(self) -> bool: ...

    async def status(self) -> SchedulerStatus: ...


class AgentPlugin(CommandPlugin):
    """
    Lets the agent manage its own thinking cycles and talk to the user.

    ``pause``/``resume``/``status`` go through the injected ``AgentController``.
    ``speak`` records ``execution_meta["speak"]`` so the think-cycle shows the
    resulting message to the user.
    """

    name = "agent"
    description = (
        "Control agent lifecycle: pause/resume thinking cycles, check status. "
        "Speaking with user. Enables self-management."
    )
    self_closing_methods = ("pause", "resume", "status")

    def __init__(self, controller: Optional[AgentController] = None, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self.controller = controller

    def default_config(self) -> Dict[str, Any]:
        return {"allow_pause": True, "allow_resume": True, "require_reason": False}

    @property
    def methods(self) -> Mapping[str, PluginHandler]:
        return {
            "execute": self.execute,
            "pause": self.pause,
            "resume": self.resume,
            "status": self.status,
            "speak": self.speak,
        }

    def instructions(self) -> List[str]:
        out: List[str] = []
        if self.config.get("allow_pause", True):
            out.append("Pause thinking cycles: [agent pause][/agent]")
        if self.config.get("allow_resume", True):
            out.append("Resume thinking cycles: [agent resume][/agent]")
        out.append("Check agent status: [agent status][/agent]")
        out.append("Write message to user: [agent speak]I have a question. How..[/agent]")
        return out

    async def execute(self, content: str) -> str:
        return "Invalid format. Use '[agent pause][/agent]', '[agent resume][/agent]' or '[agent status][/agent]'"

    def _require_controller(self) -> AgentController:
        if self.controller is None:
            raise RuntimeError("agent controller is not configured")
        return self.controller

    async def pause(self, content: str) -> str:
        if not self.config.get("allow_pause", True):
            return "Error: Agent pause is not allowed in current configuration."
        reason = content.strip()
        if self.config.get("require_reason") and not reason:
            return "Error: Reason required for pause action."
        if not await self._require_controller().pause():
            return "Agent is already paused."
        logger.info("Agent paused itself (reason=%r)", reason)
        return "Agent thinking cycles paused." + (f" Reason: {reason}" if reason else "")

    async def resume(self, content: str) -> str:
        if not self.config.get("allow_resume", True):
            return "Error: Agent resume is not allowed in current configuration."
        reason = content.strip()
        if self.config.get("require_reason") and not reason:
            return "Error: Reason required for resume action."
        if not await self._require_controller().resume():
            return "Agent is already active."
        logger.info("Agent resumed itself (reason=%r)", reason)
        return "Agent thinking cycles resumed." + (f" Reason: {reason}" if reason else "")

    async def status(self, content: str) -> str:
        st = await self._require_controller().status()
        state = "ACTIVE" if st.active else "PAUSED"
        lock_info = " (currently thinking)" if st.locked else ""
        caps = [
            label
            for key, label in (("allow_pause", "can pause"), ("allow_resume", "can resume"))
            if self.config.get(key, True)
        ]
        cap_text = " | " + ", ".join(caps) if caps else ""
        return f"Agent status: {state}{lock_info} [mode: {st.mode.value}]{cap_text}"

    async def speak(self, content: str) -> str:
        self.set_execution_meta("speak", content)
        return "The user will see your message."


ShellExec = Callable[[str], Awaitable[str]]


class ShellPlugin(CommandPlugin):
    """
    Passes its content to an injected ``shell_exec`` callable.

    Adjacent ``[shell]`` blocks are merged into one script.
    """

    name = "shell"
    description = "Execute shell commands and return their output."
    mergeable = True
    merge_separator = "\n"

    def __init__(self, shell_exec: ShellExec, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self._shell_exec = shell_exec

    def instructions(self) -> List[str]:
        return [
            "Run a shell command: [shell]ls -la[/shell]",
            "Run several commands: [shell]cd /tmp\nls[/shell]",
        ]

    async def execute(self, content: str) -> str:
        if not content.strip():
            return "Error: Empty command"
        return await self._shell_exec(content)
