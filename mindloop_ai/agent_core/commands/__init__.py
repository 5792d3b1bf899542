"""The command pipeline: pre-process, parse, validate, execute, and describe."""

from .executor import CommandExecutor, format_results
from .instructions import NO_COMMANDS, CommandInstructionBuilder
from .parser import CommandParser, LiteralCommandParser, MergingCommandParser, clean_content
from .preprocessor import MAX_FLATTEN_PASSES, CommandPreProcessor, PreProcessReport
from .validator import CommandValidator

__all__ = [
    "CommandExecutor",
    "CommandInstructionBuilder",
    "CommandParser",
    "CommandPreProcessor",
    "CommandValidator",
    "LiteralCommandParser",
    "MAX_FLATTEN_PASSES",
    "MergingCommandParser",
    "NO_COMMANDS",
    "PreProcessReport",
    "clean_content",
    "format_results",
]
