from __future__ import annotations

"""Normalisation of raw model output before parsing.

Two steps, in order:

1. **Auto-close**: ``[plugin method]`` for a self-closing method that is not
   followed by ``[/plugin]`` within a short window of plain text becomes
   ``[plugin method][/plugin]``.
2. **Flatten**: complete blocks of known plugins found *inside* another
   block's content are cut out of the parent and appended to the end of the
   text, so every intended action survives a single-pass parser.

Each pass extracts only the outermost nested blocks and appends them at
once, so blocks nested deeper are flattened by the following pass and no
command is extracted twice. Flattening repeats until a pass extracts
nothing, capped at ``MAX_FLATTEN_PASSES``. If nesting is still left when the
cap is hit, the report carries a diagnostic instead of a silent truncation.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..plugins.registry import PluginView
from .patterns import block_re

logger = logging.getLogger(__name__)

MAX_FLATTEN_PASSES = 10
AUTO_CLOSE_WINDOW = 100


@dataclass(frozen=True)
class PreProcessReport:
    """Outcome of ``CommandPreProcessor.process``."""

    text: str
    converged: bool = True
    passes: int = 0
    extracted: List[str] = field(default_factory=list)
    auto_closed: int = 0

    @property
    def diagnostic(self) -> Optional[str]:
        if self.converged:
            return None
        return (
            f"WARNING: Nested command flattening did not converge after {self.passes} passes"
            " - some nested commands may not be executed"
        )


class CommandPreProcessor:
    def __init__(self, view: PluginView, *, max_passes: int = MAX_FLATTEN_PASSES) -> None:
        self._view = view
        self._max_passes = max_passes

    def pre_process(self, text: str) -> str:
        return self.process(text).text

    def process(self, text: str) -> PreProcessReport:
        text, closed = self._auto_close(text)
        text, extracted, passes, converged = self._flatten(text)
        report = PreProcessReport(
            text=text, converged=converged, passes=passes, extracted=extracted, auto_closed=closed
        )
        if not converged:
            logger.warning(report.diagnostic)
        return report

    def _auto_close(self, text: str) -> Tuple[str, int]:
        total = 0
        for plugin in self._view.enabled():
            name = re.escape(plugin.name)
            for method in plugin.self_closing_methods:
                pattern = re.compile(
                    r"\[" + name + r"\s+" + re.escape(method) + r"\]"
                    r"(?![^\[]{0," + str(AUTO_CLOSE_WINDOW) + r"}\[/" + name + r"\])"
                )
                text, count = pattern.subn(f"[{plugin.name} {method}][/{plugin.name}]", text)
                if count:
                    total += count
                    logger.debug("Auto-closed self-closing tag [%s %s] x%d", plugin.name, method, count)
        if total:
            logger.info("Auto-closed %d self-closing tags", total)
        return text, total

    def _flatten(self, text: str) -> Tuple[str, List[str], int, bool]:
        known = self._view.names()
        extracted: List[str] = []
        passes = 0
        while passes < self._max_passes:
            passes += 1
            found: List[str] = []
            for plugin in known:

                def _rewrite(match: "re.Match[str]", plugin: str = plugin) -> str:
                    method, content = match.group(1), match.group(2)
                    nested = _find_blocks(content, known)
                    if not nested:
                        return match.group(0)
                    found.extend(nested)
                    method_part = f" {method.strip()}" if method and method.strip() else ""
                    return f"[{plugin}{method_part}]{_remove_blocks(content, known)}[/{plugin}]"

                text = block_re(plugin).sub(_rewrite, text)
            if not found:
                break
            # appended blocks are flattened again on the next pass
            extracted.extend(found)
            text += "\n\n" + "\n".join(found)

        if extracted:
            logger.info("Extracted %d nested commands in %d passes", len(extracted), passes)
        converged = not _has_nested(text, known)
        return text, extracted, passes, converged


def _find_blocks(content: str, plugins: Sequence[str]) -> List[str]:
    """Outermost complete blocks in ``content``; blocks inside another one are left to a later pass."""
    spans: List[Tuple[int, int, str]] = []
    for plugin in plugins:
        spans.extend((m.start(), m.end(), m.group(0)) for m in block_re(plugin).finditer(content))
    return [
        block
        for start, end, block in spans
        if not any(s <= start and end <= e and (s, e) != (start, end) for s, e, _ in spans)
    ]


def _has_nested(text: str, plugins: Sequence[str]) -> bool:
    return any(
        _find_blocks(m.group(2), plugins) for plugin in plugins for m in block_re(plugin).finditer(text)
    )


def _remove_blocks(content: str, plugins: Sequence[str]) -> str:
    for plugin in plugins:
        content = block_re(plugin).sub("", content)
    return content.strip()
