from __future__ import annotations

"""Advisory syntax checks over raw model output.

The validator runs on the unprocessed text, independently of the parser,
and returns plain-text lines prefixed with ``ERROR:`` or ``WARNING:``. It
never raises and never blocks execution.
"""

import logging
import re
from typing import List, Sequence

from ..plugins.registry import PluginView
from .patterns import CLOSE_TAG_RE, COMMAND_RE, OPEN_TAG_RE, close_tag_re, open_tag_re

logger = logging.getLogger(__name__)

CONTENT_PLACEHOLDER = "__CONTENT__"


class CommandValidator:
    def __init__(self, view: PluginView) -> None:
        self._view = view

    def validate(self, text: str) -> List[str]:
        try:
            known = self._view.names()
            messages: List[str] = []
            messages.extend(self._unclosed_tags(text, known))
            messages.extend(self._unknown_commands(text, known))
            messages.extend(self._same_type_nesting(text, known))
            return messages
        except Exception:
            logger.exception("Command validation failed")
            return []

    def _unclosed_tags(self, text: str, known: Sequence[str]) -> List[str]:
        messages: List[str] = []
        for plugin in known:
            self_closing = set(self._view.get(plugin).self_closing_methods)
            closer = close_tag_re(plugin)
            for match in open_tag_re(plugin).finditer(text):
                method = match.group(1)
                if method and method in self_closing:
                    continue
                if closer.search(text, match.end()) is None:
                    shown = f" {method}" if method else ""
                    messages.append(
                        f"ERROR: Command syntax error: [{plugin}{shown}] is missing closing tag [/{plugin}]"
                    )
        return messages

    def _unknown_commands(self, text: str, known: Sequence[str]) -> List[str]:
        known_set = set(known)

        def _mask(match: "re.Match[str]") -> str:
            plugin, method = match.group(1), match.group(2)
            if plugin not in known_set:
                return match.group(0)
            shown = f" {method}" if method else ""
            return f"[{plugin}{shown}]{CONTENT_PLACEHOLDER}[/{plugin}]"

        masked = COMMAND_RE.sub(_mask, text)
        available = ", ".join(known)
        tags = sorted(
            [(m.start(), m.group(0), m.group(1)) for m in OPEN_TAG_RE.finditer(masked)]
            + [(m.start(), m.group(0), m.group(1)) for m in CLOSE_TAG_RE.finditer(masked)]
        )
        return [
            f"WARNING: Unknown command: {tag} - Available commands: {available}"
            for _, tag, plugin in tags
            if plugin not in known_set
        ]

    def _same_type_nesting(self, text: str, known: Sequence[str]) -> List[str]:
        messages: List[str] = []
        for plugin in known:
            opens = [m.start() for m in open_tag_re(plugin).finditer(text)]
            closes = [m.start() for m in close_tag_re(plugin).finditer(text)]
            if len(opens) <= 1 or len(closes) <= 1:
                continue
            events = sorted([(pos, 1) for pos in opens] + [(pos, -1) for pos in closes])
            depth = 0
            for _, step in events:
                depth += step
                if depth > 1:
                    messages.append(
                        f"WARNING: Nested commands of the same type [{plugin}] detected"
                        " - this may cause unexpected behavior"
                    )
                    break
        return messages
