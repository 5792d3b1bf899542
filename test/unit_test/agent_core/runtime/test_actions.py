from __future__ import annotations

import pytest

from mindloop_ai.agent_core.plugins.registry import PluginView
from mindloop_ai.agent_core.runtime.actions import AgentActions, format_syntax_errors
from mindloop_ai.agent_core.runtime.models import CycleSettings
from mindloop_ai.agent_core.schemas.domain import AgentMode, InvocationSource, MessageRole

pytestmark = pytest.mark.asyncio


async def test_commands_turn_the_message_into_a_command_result(view: PluginView) -> None:
    outcome = await AgentActions(view).run(
        "I will check. [shell]echo hi[/shell] done", source=InvocationSource.cycle
    )

    assert outcome.role == MessageRole.command
    assert "SUCCESS: Command 1: shell" in outcome.content
    assert "Result:\nhi" in outcome.content
    assert outcome.content.startswith("I will check. [shell]echo hi[/shell] done\n\nAGENT COMMAND RESULTS:")
    assert not outcome.is_visible_to_user
    assert outcome.execution is not None and not outcome.execution.has_errors


async def test_plain_thought_is_prefixed_and_hidden(view: PluginView) -> None:
    outcome = await AgentActions(view).run("just pondering", source=InvocationSource.cycle)

    assert outcome.role == MessageRole.thinking
    assert outcome.content == "[thinking] just pondering"
    assert not outcome.is_visible_to_user
    assert outcome.execution is None


async def test_existing_prefix_is_not_doubled(view: PluginView) -> None:
    outcome = await AgentActions(view).run("[thinking] again", source=InvocationSource.cycle)
    assert outcome.content == "[thinking] again"


async def test_reply_marker_speaks_in_looped_mode(view: PluginView) -> None:
    outcome = await AgentActions(view).run("[reply] Hello there", source=InvocationSource.cycle)

    assert outcome.role == MessageRole.speaking
    assert outcome.content == "[reply] Hello there"
    assert outcome.is_visible_to_user


async def test_reply_marker_is_ignored_in_single_mode(view: PluginView) -> None:
    outcome = await AgentActions(view).run(
        "[reply] Hello there", source=InvocationSource.cycle, mode=AgentMode.single
    )
    assert outcome.role == MessageRole.thinking
    assert not outcome.is_visible_to_user


async def test_custom_markers(view: PluginView) -> None:
    settings = CycleSettings(reply_marker="@user", thinking_prefix="(thought) ")
    actions = AgentActions(view, settings)

    assert (await actions.run("@user hi", source=InvocationSource.cycle)).role == MessageRole.speaking
    assert (await actions.run("hm", source=InvocationSource.cycle)).content == "(thought) hm"


async def test_speak_makes_command_result_visible(view: PluginView) -> None:
    outcome = await AgentActions(view).run("[agent speak]Hi user[/agent]", source=InvocationSource.cycle)

    assert outcome.role == MessageRole.command
    assert outcome.is_visible_to_user
    assert outcome.execution.execution_meta == {"speak": "Hi user"}


async def test_user_text_stays_visible_user_message(view: PluginView) -> None:
    outcome = await AgentActions(view).run("hello agent", source=InvocationSource.user)

    assert outcome.role == MessageRole.user
    assert outcome.content == "hello agent"
    assert outcome.is_visible_to_user


async def test_user_text_with_commands_becomes_command(view: PluginView, shell) -> None:
    outcome = await AgentActions(view).run("run [shell]ls[/shell]", source=InvocationSource.user)

    assert outcome.role == MessageRole.command
    assert outcome.is_visible_to_user
    assert shell.scripts == ["ls"]


async def test_syntax_errors_are_appended(view: PluginView) -> None:
    outcome = await AgentActions(view).run("[memory remember]abc", source=InvocationSource.cycle)

    error = "ERROR: Command syntax error: [memory remember] is missing closing tag [/memory]"
    assert outcome.syntax_errors == [error]
    assert outcome.content == "[thinking] [memory remember]abc\n\nCOMMAND SYNTAX ERRORS:\n" + error + "\n"


async def test_self_closing_command_executes(view: PluginView) -> None:
    outcome = await AgentActions(view).run("time? [datetime timestamp]", source=InvocationSource.cycle)

    assert outcome.role == MessageRole.command
    assert "SUCCESS: Command 1: datetime timestamp" in outcome.content
    assert outcome.syntax_errors == []


async def test_nested_commands_all_execute(view: PluginView, shell) -> None:
    outcome = await AgentActions(view).run(
        "[memory remember]note [shell]pwd[/shell][/memory]", source=InvocationSource.cycle
    )

    assert [r.command.plugin for r in outcome.execution.results] == ["memory", "shell"]
    assert shell.scripts == ["pwd"]


async def test_format_syntax_errors() -> None:
    assert format_syntax_errors(["a", "b"]) == "\n\nCOMMAND SYNTAX ERRORS:\na\nb\n"
