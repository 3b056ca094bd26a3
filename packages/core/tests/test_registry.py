"""Tests for the live row registry."""

import io
import logging

import pytest
from rich.console import Console

from prwatch_core.registry import SPINNER_PLACEHOLDER, RowColumn, RowRegistry, render_row
from prwatch_core.rows import RowKind, RowSpec

DOTS2_FRAMES = "⣾⣽⣻⢿⡿⣟⣯⣷"


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def registry(console):
    return RowRegistry(console=console)


def _rows(*keys):
    return [RowSpec(key=k, prefix=k, message=f"value of {k}") for k in keys]


def _styles(text):
    return {str(span.style) for span in text.spans}


class TestRender:
    def test_creates_rows_in_order(self, registry):
        registry.render(_rows("a", "b", "c"))
        assert registry.keys == ["a", "b", "c"]

    def test_second_identical_render_is_a_no_op(self, registry, mocker):
        rows = _rows("a", "b")
        registry.render(rows)
        before = registry.lines()
        add = mocker.spy(registry._progress, "add_task")
        update = mocker.spy(registry._progress, "update")

        registry.render(rows)

        add.assert_not_called()
        update.assert_not_called()
        assert registry.lines() == before

    def test_updates_in_place(self, registry):
        registry.render(_rows("a", "b"))
        registry.render([RowSpec(key="a", prefix="a", message="changed"), *_rows("b")])
        assert registry.keys == ["a", "b"]
        assert registry.get("a").message == "changed"

    def test_never_reorders(self, registry):
        registry.render(_rows("a", "b"))
        registry.render(_rows("b", "a"))
        assert registry.keys == ["a", "b"]

    def test_new_keys_appended(self, registry):
        registry.render(_rows("a", "c"))
        registry.render(_rows("a", "b", "c"))
        assert registry.keys == ["a", "c", "b"]

    def test_rows_never_removed(self, registry):
        registry.render(_rows("header", "f1"))
        registry.render(_rows("header", "f1", "f2"))
        registry.render(_rows("header"))
        registry.render(_rows("header", "f1", "f2", "ci"))
        assert registry.keys == ["header", "f1", "f2", "ci"]

    def test_duplicate_key_in_frame_last_wins(self, registry):
        registry.render([RowSpec(key="a", message="first"), RowSpec(key="a", message="second")])
        assert registry.keys == ["a"]
        assert registry.get("a").message == "second"

    def test_failing_row_is_skipped_and_logged(self, registry, mocker, caplog):
        real_add = registry._progress.add_task

        def flaky(description, **kwargs):
            if description == "bad":
                raise OSError("broken pipe")
            return real_add(description, **kwargs)

        mocker.patch.object(registry._progress, "add_task", side_effect=flaky)
        with caplog.at_level(logging.WARNING):
            registry.render(_rows("a", "bad", "c"))

        assert registry.keys == ["a", "c"]
        assert "bad" in caplog.text

    def test_refresh_failure_does_not_raise(self, registry, mocker, caplog):
        mocker.patch.object(registry._progress, "refresh", side_effect=OSError("tty gone"))
        with caplog.at_level(logging.WARNING):
            registry.render(_rows("a"))
        assert registry.keys == ["a"]
        assert "tty gone" in caplog.text


class TestNeedsTicking:
    def test_false_without_spinners(self, registry):
        registry.render(_rows("a"))
        assert registry.needs_ticking is False

    def test_true_while_a_check_spins(self, registry):
        registry.render([RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[ .. ]", spinning=True)])
        assert registry.needs_ticking is True

    def test_false_once_check_finishes(self, registry):
        registry.render([RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[ .. ]", spinning=True)])
        registry.render([RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[ OK ]", style="green")])
        assert registry.needs_ticking is False


class TestRenderRow:
    def test_header(self):
        text = render_row(RowSpec(key="header", kind=RowKind.HEADER, prefix="#7 - Fix"))
        assert text.plain == "====> #7 - Fix"
        assert "bold white" in _styles(text)

    def test_section(self):
        text = render_row(RowSpec(key="files", kind=RowKind.SECTION, prefix="Files"))
        assert text.plain == "----> Files"
        assert "bold dim" in _styles(text)

    def test_labeled_default_width(self):
        text = render_row(RowSpec(key="state", prefix="state", message="OPEN"))
        assert text.plain == "state      --> OPEN"

    def test_aligned_file_rows(self):
        a = render_row(RowSpec(key="a.go", prefix="a.go", message="3+1-", indent=2, prefix_width=5))
        bb = render_row(RowSpec(key="bb.go", prefix="bb.go", message="10+0-", indent=2, prefix_width=5))
        assert a.plain == "  --> a.go  | 3+1-"
        assert bb.plain == "  --> bb.go | 10+0-"
        assert a.plain.index("|") == bb.plain.index("|")

    def test_diff_stat_colours(self):
        text = render_row(RowSpec(key="a.go", prefix="a.go", message="3+1-", prefix_width=4))
        assert {"green", "red"} <= _styles(text)

    def test_plain_with_marker_and_indent(self):
        text = render_row(RowSpec(key="url", kind=RowKind.PLAIN, prefix=">", message="https://x", indent=4))
        assert text.plain == "    > https://x"

    def test_plain_message_only(self):
        assert render_row(RowSpec(key="_body", kind=RowKind.PLAIN, message="hello")).plain == "hello"

    def test_terminal_check(self):
        text = render_row(RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[ OK ]", style="green"))
        assert text.plain == "[ OK ] ci"
        assert "green" in _styles(text)

    def test_spinning_check_uses_placeholder(self):
        text = render_row(RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[ .. ]", spinning=True))
        assert text.plain == f"[ .. ] {SPINNER_PLACEHOLDER} ci"


class TestRowColumn:
    def test_renders_spinner_frame_for_spinning_rows(self, registry):
        registry.render([RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[ .. ]", spinning=True)])
        task = registry._progress.tasks[0]
        text = RowColumn().render(task)
        assert text.plain.startswith("[ .. ] ")
        assert text.plain.endswith(" ci")
        assert text.plain[len("[ .. ] ")] in DOTS2_FRAMES

    def test_static_rows_have_no_spinner(self, registry):
        registry.render([RowSpec(key="ci", kind=RowKind.CHECK, prefix="ci", message="[Fail]", style="red")])
        text = RowColumn().render(registry._progress.tasks[0])
        assert text.plain == "[Fail] ci"


class TestLiveDisplay:
    def test_final_frame_written_to_sink(self, console):
        with RowRegistry(console=console) as registry:
            registry.render(
                [
                    RowSpec(key="header", kind=RowKind.HEADER, prefix="#7 - Fix login bug"),
                    RowSpec(key="state", prefix="state", message="OPEN"),
                ]
            )
        output = console.file.getvalue()
        assert "#7 - Fix login bug" in output
        assert "OPEN" in output
        assert output.index("#7 - Fix login bug") < output.index("OPEN")
