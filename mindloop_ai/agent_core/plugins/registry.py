from __future__ import annotations

"""Plugin registry and context-bound views.

The registry owns plugin instances for the process lifetime. Once per cycle
the think-cycle calls ``bind`` with the active ``AgentContext``; the registry
replaces its disabled-name set, pushes configuration overrides into the
plugins and returns a ``PluginView``. The pre-processor, parser, validator,
executor and instruction builder only ever see that view.
"""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..errors import PluginDisabled, UnknownPlugin
from ..schemas.domain import AgentContext
from .base import CommandPlugin

logger = logging.getLogger(__name__)


class PluginView:
    """Read-only snapshot of the registry bound to one context."""

    def __init__(
        self,
        plugins: Dict[str, CommandPlugin],
        disabled: Iterable[str] = (),
        context: Optional[AgentContext] = None,
    ) -> None:
        self._plugins = dict(plugins)
        self._disabled: FrozenSet[str] = frozenset(disabled)
        self.context = context

    def is_disabled(self, name: str) -> bool:
        if name in self._disabled:
            return True
        plugin = self._plugins.get(name)
        return plugin is not None and not plugin.enabled

    def is_registered(self, name: str) -> bool:
        return name in self._plugins

    def has(self, name: str) -> bool:
        return name in self._plugins and not self.is_disabled(name)

    def get(self, name: str) -> CommandPlugin:
        """
        Resolve an enabled plugin.

        Raises:
            UnknownPlugin: If nothing is registered under ``name``.
            PluginDisabled: If the plugin is registered but disabled for this context.
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            raise UnknownPlugin(name)
        if self.is_disabled(name):
            raise PluginDisabled(name)
        return plugin

    def enabled(self) -> List[CommandPlugin]:
        return [p for n, p in self._plugins.items() if not self.is_disabled(n)]

    def names(self) -> List[str]:
        return [p.name for p in self.enabled()]


class PluginRegistry:
    """
    In-memory mapping of plugin names to plugin instances.

    Notes:
        - ``register`` overwrites any existing plugin with the same name.
        - ``get`` will raise ``KeyError`` if the plugin is missing.
        - The disabled set is replaced on every ``bind``, never merged.
    """

    def __init__(self, plugins: Iterable[CommandPlugin] = ()) -> None:
        self._plugins: Dict[str, CommandPlugin] = {}
        self._disabled: FrozenSet[str] = frozenset()
        self._view: Optional[PluginView] = None
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: CommandPlugin) -> None:
        if not plugin.name:
            raise ValueError(f"{type(plugin).__name__} has no name")
        self._plugins[plugin.name] = plugin
        self._view = None

    def has(self, name: str) -> bool:
        return name in self._plugins

    def get(self, name: str) -> CommandPlugin:
        return self._plugins[name]

    def all(self) -> List[CommandPlugin]:
        return list(self._plugins.values())

    def names(self) -> List[str]:
        return list(self._plugins)

    @property
    def disabled(self) -> FrozenSet[str]:
        return self._disabled

    def bind(self, context: AgentContext) -> PluginView:
        """
        Bind every plugin to ``context`` and return the resulting view.

        Args:
            context: The active context for the cycle about to run.

        Returns:
            A ``PluginView`` honouring the context's disabled list and its
            ``enabled: False`` overrides.
        """
        disabled = set(context.disabled_plugins)
        for name, overrides in context.plugin_config.items():
            plugin = self._plugins.get(name)
            if plugin is None:
                logger.debug("Ignoring config for unregistered plugin %s", name)
                continue
            overrides = dict(overrides)
            if not overrides.pop("enabled", True):
                disabled.add(name)
            plugin.update_config(overrides)
        self._disabled = frozenset(disabled)
        for plugin in self._plugins.values():
            plugin.bind_context(context)
        self._view = PluginView(self._plugins, self._disabled, context)
        logger.debug(
            "Bound plugins to context %s (disabled=%s)", context.id, sorted(self._disabled)
        )
        return self._view

    def current_view(self) -> PluginView:
        if self._view is None:
            self._view = PluginView(self._plugins, self._disabled)
        return self._view
