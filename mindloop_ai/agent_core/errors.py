"""Exception hierarchy for the agent core.

Errors are recovered at the boundary that can act on them:

- ``PluginError`` subclasses are converted into failed ``CommandResult`` items
  by the executor, one command at a time.
- ``EngineNotFound`` and anything else raised inside a think-cycle become a
  single visible system message.
- ``LeaseError`` surfaces scheduler misuse (releasing a lease held by another
  owner).
"""

from __future__ import annotations


class MindLoopError(Exception):
    """Base class for all errors raised by this package."""


class PluginError(MindLoopError):
    """A command could not be dispatched to a plugin."""


class UnknownPlugin(PluginError):
    def __init__(self, plugin: str) -> None:
        super().__init__(f"Unknown plugin: {plugin}")
        self.plugin = plugin


class PluginDisabled(PluginError):
    def __init__(self, plugin: str) -> None:
        super().__init__(f"Plugin '{plugin}' is disabled")
        self.plugin = plugin


class MethodNotFound(PluginError):
    def __init__(self, plugin: str, method: str) -> None:
        super().__init__(f"Method '{method}' not found in plugin '{plugin}'")
        self.plugin = plugin
        self.method = method


class EngineNotFound(MindLoopError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Model engine '{name}' is not registered")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class LeaseError(MindLoopError):
    """The cycle lease is held by somebody else."""
