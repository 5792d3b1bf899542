"""Command plugins: the contract, the registry with its bound views, and built-ins."""

from .base import CommandPlugin, PluginHandler
from .builtin import AgentController, AgentPlugin, DateTimePlugin, ShellPlugin
from .registry import PluginRegistry, PluginView

__all__ = [
    "AgentController",
    "AgentPlugin",
    "CommandPlugin",
    "DateTimePlugin",
    "PluginHandler",
    "PluginRegistry",
    "PluginView",
    "ShellPlugin",
]
