from __future__ import annotations

"""Dispatch of parsed commands to plugins.

Each command runs in isolation: an unknown plugin, a disabled plugin, an
undeclared method or an exception raised by the handler yields one failed
``CommandResult`` and the batch carries on. After the batch, results are
rendered into a single turn text appended to the original model output.
"""

import logging
from typing import Dict, Iterable, List

from ..errors import PluginError
from ..plugins.registry import PluginView
from ..schemas.domain import DEFAULT_METHOD, CommandExecutionResult, CommandResult, ParsedCommand

logger = logging.getLogger(__name__)

RESULTS_BANNER = "AGENT COMMAND RESULTS:"
RULE = "-" * 40


class CommandExecutor:
    def __init__(self, view: PluginView) -> None:
        self._view = view

    async def execute_commands(
        self, commands: Iterable[ParsedCommand], original_text: str = ""
    ) -> CommandExecutionResult:
        results: List[CommandResult] = []
        meta: Dict[str, str] = {}
        for command in commands:
            result = await self._execute(command)
            results.append(result)
            meta = _merge_meta(meta, result.execution_meta)
        failed = sum(1 for r in results if not r.success)
        logger.info("Executed %d commands (%d failed)", len(results), failed)
        return CommandExecutionResult(
            results=results,
            formatted_message=format_results(results, original_text),
            execution_meta=meta,
        )

    async def _execute(self, command: ParsedCommand) -> CommandResult:
        try:
            plugin = self._view.get(command.plugin)
        except PluginError as e:
            logger.info("Rejected command %s::%s: %s", command.plugin, command.method, e)
            return CommandResult(command=command, success=False, error=str(e))

        if command.method != DEFAULT_METHOD and not plugin.has_method(command.method):
            return CommandResult(
                command=command,
                success=False,
                error=f"Method '{command.method}' not found in plugin '{command.plugin}'",
            )

        plugin.reset_execution_meta()
        try:
            if command.method == DEFAULT_METHOD:
                output = await plugin.execute(command.content)
            else:
                output = await plugin.call_method(command.method, command.content)
        except Exception as e:
            logger.exception(
                "Command execution error in %s::%s (content=%r)",
                command.plugin,
                command.method,
                command.content[:100],
            )
            return CommandResult(
                command=command,
                success=False,
                error=f"Error executing {command.plugin}::{command.method}: {e}",
            )
        return CommandResult(
            command=command,
            result="" if output is None else str(output),
            success=True,
            execution_meta=dict(plugin.execution_meta),
        )


def _merge_meta(base: Dict[str, str], override: Dict[str, str]) -> Dict[str, str]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], str) and isinstance(value, str):
            merged[key] = merged[key] + " " + value
        else:
            merged[key] = value
    return merged


def format_results(results: Iterable[CommandResult], original_text: str = "") -> str:
    """
    Render results as the turn text shown to the model on the next cycle.

    Layout::

        <original text>

        AGENT COMMAND RESULTS:

        SUCCESS: Command 1: shell
        Result:
        hi
        ----------------------------------------
    """
    lines: List[str] = [original_text, "", RESULTS_BANNER, ""] if original_text else [RESULTS_BANNER, ""]
    for index, result in enumerate(results, start=1):
        command = result.command
        label = command.plugin if command.method == DEFAULT_METHOD else f"{command.plugin} {command.method}"
        if result.success:
            lines.append(f"SUCCESS: Command {index}: {label}")
            lines.append("Result:")
            lines.append(result.result)
        else:
            lines.append(f"FAILED: Command {index}: {label}")
            lines.append(f"ERROR: {result.error}")
        lines.append(RULE)
    return "\n".join(lines)
