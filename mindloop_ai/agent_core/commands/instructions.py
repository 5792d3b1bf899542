from __future__ import annotations

from typing import List

from ..plugins.registry import PluginView

NO_COMMANDS = "No commands available."

CRITICAL_RULES = """CRITICAL RULES:
- NEVER write 'AGENT COMMAND RESULTS' yourself. The system adds command output after execution.
- NEVER invent or imitate command output. Wait for the real results in the next cycle.
- Pay attention to command output and correct your commands when they fail.
- ALWAYS use matching opening and closing tags: [command]...[/command] or [command method]...[/command]."""


class CommandInstructionBuilder:
    """Renders the catalog of enabled commands for the next generation request."""

    def __init__(self, view: PluginView) -> None:
        self._view = view

    def build_instructions(self) -> str:
        plugins = self._view.enabled()
        if not plugins:
            return NO_COMMANDS

        parts: List[str] = ["AVAILABLE COMMANDS:\n\n"]
        for plugin in plugins:
            parts.append(f"Command: {plugin.name}\n")
            parts.append(f"Description: {plugin.description}\n")
            for i, example in enumerate(plugin.instructions(), start=1):
                parts.append(f"Usage example {i}:\n{example}\n")
            parts.append("-" * 40 + "\n\n")
        parts.append(CRITICAL_RULES)
        return "".join(parts)
