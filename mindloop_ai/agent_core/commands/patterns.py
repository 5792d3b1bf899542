"""Regular expressions for the bracket tag language.

``[plugin]content[/plugin]`` or ``[plugin method]content[/plugin]`` where both
identifiers match ``[a-z][a-z0-9_]*``. Content is matched non-greedily up to
the first close tag of the same plugin; nesting of the same plugin is not
understood here.
"""

from __future__ import annotations

import re
from typing import Pattern

IDENTIFIER = r"[a-z][a-z0-9_]*"

COMMAND_RE: Pattern[str] = re.compile(
    r"\[(" + IDENTIFIER + r")(?: (" + IDENTIFIER + r"))?\](.*?)\[/\1\]",
    re.DOTALL,
)

OPEN_TAG_RE: Pattern[str] = re.compile(r"\[(" + IDENTIFIER + r")(?: (" + IDENTIFIER + r"))?\]")

CLOSE_TAG_RE: Pattern[str] = re.compile(r"\[/(" + IDENTIFIER + r")\]")

_LEADING_FENCE_RE = re.compile(r"^```(?:\w+)?\s*")
_TRAILING_FENCE_RE = re.compile(r"\s*```$")


def block_re(plugin: str) -> Pattern[str]:
    """Complete block of one plugin, with an optional method."""
    name = re.escape(plugin)
    return re.compile(
        r"\[" + name + r"(?:\s+(" + IDENTIFIER + r"))?\](.*?)\[/" + name + r"\]",
        re.DOTALL,
    )


def open_tag_re(plugin: str) -> Pattern[str]:
    return re.compile(r"\[" + re.escape(plugin) + r"(?: (" + IDENTIFIER + r"))?\]")


def close_tag_re(plugin: str) -> Pattern[str]:
    return re.compile(r"\[/" + re.escape(plugin) + r"\]")


def strip_code_fences(content: str) -> str:
    content = _LEADING_FENCE_RE.sub("", content, count=1)
    return _TRAILING_FENCE_RE.sub("", content, count=1)
