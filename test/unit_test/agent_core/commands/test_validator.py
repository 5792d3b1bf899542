from __future__ import annotations

import pytest

from mindloop_ai.agent_core.commands.validator import CommandValidator
from mindloop_ai.agent_core.plugins.registry import PluginView


def test_missing_close_tag_is_an_error(view: PluginView) -> None:
    assert CommandValidator(view).validate("[memory remember]abc") == [
        "ERROR: Command syntax error: [memory remember] is missing closing tag [/memory]"
    ]


def test_missing_close_tag_without_method(view: PluginView) -> None:
    assert CommandValidator(view).validate("[shell]ls") == [
        "ERROR: Command syntax error: [shell] is missing closing tag [/shell]"
    ]


def test_self_closing_opener_is_not_an_error(view: PluginView) -> None:
    assert CommandValidator(view).validate("[agent pause]") == []


def test_unknown_tag_inside_known_block_is_not_flagged(view: PluginView) -> None:
    assert CommandValidator(view).validate("[memory]see [unknown] in text[/memory]") == []


def test_unknown_command_is_flagged(view: PluginView) -> None:
    messages = CommandValidator(view).validate("[unknown]x[/unknown]")

    available = "datetime, agent, shell, memory"
    assert messages == [
        f"WARNING: Unknown command: [unknown] - Available commands: {available}",
        f"WARNING: Unknown command: [/unknown] - Available commands: {available}",
    ]


def test_disabled_plugin_counts_as_unknown(registry, context) -> None:
    view = registry.bind(context.model_copy(update={"disabled_plugins": ["shell"]}))
    messages = CommandValidator(view).validate("[shell]ls[/shell]")

    assert messages[0] == "WARNING: Unknown command: [shell] - Available commands: datetime, agent, memory"


def test_same_type_nesting_is_warned(view: PluginView) -> None:
    messages = CommandValidator(view).validate("[memory]a [memory]b[/memory] c[/memory]")
    assert messages == [
        "WARNING: Nested commands of the same type [memory] detected - this may cause unexpected behavior"
    ]


def test_sequential_blocks_are_not_nesting(view: PluginView) -> None:
    assert CommandValidator(view).validate("[memory]a[/memory] [memory]b[/memory]") == []


def test_well_formed_text_is_clean(view: PluginView) -> None:
    assert CommandValidator(view).validate("I will check. [shell]echo hi[/shell] done") == []


def test_internal_failure_returns_no_messages(view: PluginView, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom():
        raise RuntimeError("registry exploded")

    monkeypatch.setattr(view, "names", boom)
    assert CommandValidator(view).validate("[shell]ls") == []
