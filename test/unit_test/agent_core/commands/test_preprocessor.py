from __future__ import annotations

import logging

import pytest

from mindloop_ai.agent_core.commands.parser import MergingCommandParser
from mindloop_ai.agent_core.commands.preprocessor import CommandPreProcessor
from mindloop_ai.agent_core.plugins.registry import PluginView


class TestAutoClose:
    def test_self_closing_method_gets_empty_close_tag(self, view: PluginView) -> None:
        assert CommandPreProcessor(view).pre_process("[agent pause]") == "[agent pause][/agent]"

    def test_every_occurrence_is_closed(self, view: PluginView) -> None:
        out = CommandPreProcessor(view).pre_process("[datetime now] and [datetime timestamp]")
        assert out == "[datetime now][/datetime] and [datetime timestamp][/datetime]"

    def test_non_self_closing_method_is_untouched(self, view: PluginView) -> None:
        assert CommandPreProcessor(view).pre_process("[agent speak]") == "[agent speak]"

    def test_already_closed_tag_is_untouched(self, view: PluginView) -> None:
        text = "[agent pause]feeling tired[/agent]"
        report = CommandPreProcessor(view).process(text)
        assert report.text == text
        assert report.auto_closed == 0

    def test_close_tag_beyond_window_does_not_count(self, view: PluginView) -> None:
        text = "[agent pause]" + "x" * 150 + "[/agent]"
        out = CommandPreProcessor(view).pre_process(text)
        assert out.startswith("[agent pause][/agent]")

    def test_disabled_plugin_is_not_auto_closed(self, registry, context) -> None:
        view = registry.bind(context.model_copy(update={"disabled_plugins": ["agent"]}))
        assert CommandPreProcessor(view).pre_process("[agent pause]") == "[agent pause]"


class TestFlatten:
    def test_nested_block_is_moved_to_the_end(self, view: PluginView) -> None:
        report = CommandPreProcessor(view).process("[memory]note [shell]ls[/shell] end[/memory]")

        assert report.converged
        assert report.extracted == ["[shell]ls[/shell]"]
        assert report.text == "[memory]note  end[/memory]\n\n[shell]ls[/shell]"
        assert report.diagnostic is None

    def test_flattened_text_parses_into_every_command(self, view: PluginView) -> None:
        text = CommandPreProcessor(view).pre_process("[memory remember]a [datetime][/datetime][/memory]")
        commands = MergingCommandParser(view).parse(text)
        assert [(c.plugin, c.method) for c in commands] == [("memory", "remember"), ("datetime", "execute")]

    def test_unknown_nested_tags_stay_in_content(self, view: PluginView) -> None:
        text = "[memory]see [unknown]x[/unknown] here[/memory]"
        assert CommandPreProcessor(view).pre_process(text) == text

    def test_deeper_nesting_is_flattened_on_later_passes(self, view: PluginView) -> None:
        report = CommandPreProcessor(view).process(
            "[agent speak]hi [shell]ls [datetime timestamp][/datetime][/shell][/agent]"
        )

        assert report.converged
        assert report.passes == 3
        assert report.text == (
            "[agent speak]hi[/agent]\n\n[shell]ls[/shell]\n\n[datetime timestamp][/datetime]"
        )

    def test_each_nested_command_is_extracted_once(self, view: PluginView) -> None:
        text = CommandPreProcessor(view).pre_process(
            "[agent speak]hi [shell]ls [datetime timestamp][/datetime][/shell][/agent]"
        )
        commands = MergingCommandParser(view).parse(text)

        assert [(c.plugin, c.method, c.content) for c in commands] == [
            ("agent", "speak", "hi"),
            ("shell", "execute", "ls"),
            ("datetime", "timestamp", ""),
        ]

    def test_cap_reached_with_nothing_left_is_converged(self, view: PluginView) -> None:
        report = CommandPreProcessor(view, max_passes=1).process("[memory]a [shell]ls[/shell][/memory]")

        assert report.converged
        assert report.passes == 1
        assert report.diagnostic is None

    def test_non_convergence_is_reported(self, view: PluginView, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            report = CommandPreProcessor(view, max_passes=1).process(
                "[agent speak]hi [shell]ls [datetime timestamp][/datetime][/shell][/agent]"
            )

        assert not report.converged
        assert report.passes == 1
        assert report.text.endswith("[shell]ls [datetime timestamp][/datetime][/shell]")
        assert report.diagnostic == (
            "WARNING: Nested command flattening did not converge after 1 passes"
            " - some nested commands may not be executed"
        )
        assert "did not converge" in caplog.text

    @pytest.mark.parametrize(
        "text",
        [
            "plain text without commands",
            "[agent pause]",
            "[memory]note [shell]ls[/shell] end[/memory]",
            "[shell]echo hi[/shell] then [datetime now]",
        ],
    )
    def test_pre_process_is_idempotent(self, view: PluginView, text: str) -> None:
        pre = CommandPreProcessor(view)
        once = pre.pre_process(text)
        assert pre.pre_process(once) == once
