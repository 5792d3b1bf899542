from __future__ import annotations

"""Command plugin contract.

A plugin is the concrete execution unit addressed from the tag language:
``[plugin method]content[/plugin]``.

The executor resolves ``ParsedCommand.plugin`` through a bound
``PluginView`` and dispatches to one of the plugin's declared methods.

Plugins should:

- declare every callable method explicitly in ``methods``; nothing else is
  reachable from model output,
- return plain text; the executor owns formatting and error reporting,
- keep configuration in ``config``, which is updated in place when a new
  context is bound and never rebuilt. ``enabled`` is not part of it: a
  constructor ``{"enabled": False}`` switches the plugin off for good, while a
  context override only disables it for views bound to that context.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from ..errors import MethodNotFound
from ..schemas.domain import DEFAULT_METHOD, AgentContext

PluginHandler = Callable[[str], Awaitable[str]]


class CommandPlugin(ABC):
    """Base class for every capability reachable from the tag language.

    Class attributes
    ----------------
    name:
        Lowercase identifier used in tags (``[name]...[/name]``).
    description:
        One-line summary rendered in the command catalog.
    mergeable / merge_separator:
        Merge policy used by ``MergingCommandParser`` for adjacent blocks.
    self_closing_methods:
        Methods that take no payload; the pre-processor closes
        ``[name method]`` automatically for them.
    """

    name: str = ""
    description: str = ""
    mergeable: bool = False
    merge_separator: str = "\n"
    self_closing_methods: Tuple[str, ...] = ()

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.enabled: bool = True
        self.config: Dict[str, Any] = self.default_config()
        self.context: Optional[AgentContext] = None
        self.execution_meta: Dict[str, str] = {}
        if config:
            config = dict(config)
            self.enabled = bool(config.pop("enabled", True))
            self.update_config(config)

    @abstractmethod
    async def execute(self, content: str) -> str:
        """Default action for ``[name]content[/name]``."""

    @property
    def methods(self) -> Mapping[str, PluginHandler]:
        """Closed mapping of method name to handler. Subclasses extend it."""
        return {DEFAULT_METHOD: self.execute}

    def instructions(self) -> List[str]:
        return []

    def default_config(self) -> Dict[str, Any]:
        return {}

    def update_config(self, overrides: Mapping[str, Any]) -> None:
        self.config.update(overrides)

    def bind_context(self, context: Optional[AgentContext]) -> None:
        self.context = context

    def has_method(self, method: str) -> bool:
        return method in self.methods

    def available_methods(self) -> List[str]:
        return list(self.methods)

    async def call_method(self, method: str, content: str) -> str:
        handler = self.methods.get(method)
        if handler is None:
            raise MethodNotFound(self.name, method)
        return await handler(content)

    def reset_execution_meta(self) -> None:
        self.execution_meta = {}

    def set_execution_meta(self, key: str, value: str) -> None:
        self.execution_meta[key] = value
