from __future__ import annotations

import html
import logging
from typing import List, Optional, Protocol

from ..plugins.registry import PluginView
from ..schemas.domain import DEFAULT_METHOD, ParsedCommand
from .patterns import COMMAND_RE, strip_code_fences

logger = logging.getLogger(__name__)


class CommandParser(Protocol):
    def parse(self, text: str) -> List[ParsedCommand]: ...


def clean_content(content: str) -> str:
    """Strip code fences, decode HTML entities and trim a command body."""
    content = strip_code_fences(content.strip())
    return html.unescape(content).strip()


class LiteralCommandParser:
    """Every complete block becomes one command, in source order."""

    def parse(self, text: str) -> List[ParsedCommand]:
        commands: List[ParsedCommand] = []
        for match in COMMAND_RE.finditer(text):
            plugin, method, content = match.group(1), match.group(2), match.group(3)
            commands.append(
                ParsedCommand(
                    plugin=plugin,
                    method=method or DEFAULT_METHOD,
                    content=clean_content(content),
                    position=match.start(),
                )
            )
        return commands


class MergingCommandParser:
    """
    Literal parse followed by folding of adjacent same-type commands.

    Two neighbouring commands fold only when plugin and method match and the
    plugin in the bound view reports ``mergeable``. The plugin's
    ``merge_separator`` joins the bodies; the first command's position is kept.
    """

    def __init__(self, view: PluginView, literal: Optional[LiteralCommandParser] = None) -> None:
        self._view = view
        self._literal = literal or LiteralCommandParser()

    def parse(self, text: str) -> List[ParsedCommand]:
        merged: List[ParsedCommand] = []
        for command in self._literal.parse(text):
            if merged and self._can_merge(merged[-1], command):
                first = merged[-1]
                separator = self._view.get(first.plugin).merge_separator
                merged[-1] = first.model_copy(update={"content": first.content + separator + command.content})
                continue
            merged.append(command)
        return merged

    def _can_merge(self, first: ParsedCommand, second: ParsedCommand) -> bool:
        if first.plugin != second.plugin or first.method != second.method:
            return False
        if not self._view.has(first.plugin):
            return False
        return self._view.get(first.plugin).mergeable
