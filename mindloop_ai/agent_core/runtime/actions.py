from __future__ import annotations

"""Turning one text into one message.

``AgentActions.run`` is the single entry point for both model output
(``InvocationSource.cycle``) and text typed by a user
(``InvocationSource.user``). It pre-processes, parses, validates and
executes, then decides the role, content and visibility of the message to
persist. Nothing is persisted here.
"""

import logging
from typing import List, Optional, Tuple

from ..commands.executor import CommandExecutor
from ..commands.parser import CommandParser, MergingCommandParser
from ..commands.preprocessor import CommandPreProcessor
from ..commands.validator import CommandValidator
from ..plugins.registry import PluginView
from ..schemas.domain import ActionsOutcome, AgentMode, CommandExecutionResult, InvocationSource, MessageRole
from .models import CycleSettings

logger = logging.getLogger(__name__)

SYNTAX_ERRORS_HEADER = "\n\nCOMMAND SYNTAX ERRORS:\n"


def format_syntax_errors(messages: List[str]) -> str:
    return SYNTAX_ERRORS_HEADER + "".join(f"{m}\n" for m in messages)


class AgentActions:
    def __init__(
        self,
        view: PluginView,
        settings: Optional[CycleSettings] = None,
        *,
        parser: Optional[CommandParser] = None,
    ) -> None:
        self._settings = settings or CycleSettings()
        self._preprocessor = CommandPreProcessor(view)
        self._parser = parser or MergingCommandParser(view)
        self._validator = CommandValidator(view)
        self._executor = CommandExecutor(view)

    async def run(
        self,
        text: str,
        *,
        source: InvocationSource,
        mode: AgentMode = AgentMode.looped,
    ) -> ActionsOutcome:
        """
        Process ``text`` and decide the message it becomes.

        Args:
            text: Model output or user input.
            source: Who produced ``text``; user text is visible and keeps role ``user``.
            mode: Scheduler mode; the reply marker only counts in ``looped`` mode.

        Returns:
            The role, content and visibility of the message to persist.
        """
        report = self._preprocessor.process(text)
        commands = self._parser.parse(report.text)
        syntax_errors = self._validator.validate(text)
        if report.diagnostic:
            syntax_errors.append(report.diagnostic)

        role, content, visible = self._base_role(text, source, mode)

        execution: Optional[CommandExecutionResult] = None
        if commands:
            execution = await self._executor.execute_commands(commands, original_text=text)
            role = MessageRole.command
            content = execution.formatted_message
            if "speak" in execution.execution_meta:
                visible = True

        if syntax_errors:
            logger.info("Found %d command syntax problems", len(syntax_errors))
            content += format_syntax_errors(syntax_errors)

        return ActionsOutcome(
            role=role,
            content=content,
            is_visible_to_user=visible,
            execution=execution,
            syntax_errors=syntax_errors,
        )

    def _base_role(self, text: str, source: InvocationSource, mode: AgentMode) -> Tuple[MessageRole, str, bool]:
        if source == InvocationSource.user:
            return MessageRole.user, text, True
        marker = self._settings.reply_marker
        if mode == AgentMode.looped and marker and marker in text:
            return MessageRole.speaking, text, True
        prefix = self._settings.thinking_prefix
        if prefix and not text.startswith(prefix.rstrip()):
            return MessageRole.thinking, prefix + text, False
        return MessageRole.thinking, text, False
