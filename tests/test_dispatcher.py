"""Tests for command dispatch."""

import pytest

from multicall.dispatcher import (
    HELP_EXIT_CODE,
    Dispatcher,
    DispatchStatus,
    split_program_name,
)
from multicall.registry import CommandRegistry


class TestSplitProgramName:
    """Tests for split_program_name()."""

    def test_plain_name(self):
        assert split_program_name("/usr/bin/tool") == ("tool", None)

    def test_dotted_name(self):
        assert split_program_name("/usr/bin/tool.status") == ("tool", "status")

    def test_splits_on_first_dot(self):
        assert split_program_name("tool.a.b") == ("tool", "a.b")

    def test_dot_in_directory_ignored(self):
        assert split_program_name("/opt/v1.2/tool") == ("tool", None)


class TestRun:
    """Tests for Dispatcher.run()."""

    def test_runs_operation(self, git_ops, registry):
        result = Dispatcher(registry).run("cm", ["-m", "msg"], prog="tool")
        assert result.status is DispatchStatus.DISPATCHED
        assert result.exit_code == 0
        assert result.operation.name == "Commit"
        assert git_ops.calls == ["commit"]
        assert git_ops.seen_args == ["-m", "msg"]

    def test_unknown_alias_shows_help(self, git_ops, registry, capsys):
        result = Dispatcher(registry).run("nope", prog="tool")
        assert result.status is DispatchStatus.NOT_FOUND
        assert result.exit_code == HELP_EXIT_CODE == 2
        assert capsys.readouterr().out == "cm => Commit\nhello => Hello\n"
        assert git_ops.calls == []

    def test_unknown_alias_is_logged(self, registry, caplog):
        with caplog.at_level("WARNING", logger="multicall.dispatcher"):
            Dispatcher(registry).run("nope", prog="tool")
        assert "command not found: nope" in caplog.text

    def test_exact_match_only_by_default(self, git_ops, registry):
        result = Dispatcher(registry).run("hel", prog="tool")
        assert result.status is DispatchStatus.NOT_FOUND
        assert git_ops.calls == []

    def test_prefix_match_when_enabled(self, git_ops, registry):
        result = Dispatcher(registry).run("hell", prog="tool", prefix=True)
        assert result.status is DispatchStatus.DISPATCHED
        assert git_ops.calls == ["hello"]

    def test_ambiguous_prefix_shows_help(self, capsys):
        registry = CommandRegistry.build(
            object(), [("Commit", lambda r: None), ("Comment", lambda r: None)]
        )
        result = Dispatcher(registry).run("com", prog="tool", prefix=True)
        assert result.status is DispatchStatus.NOT_FOUND
        assert "commit => Commit" in capsys.readouterr().out

    def test_help_command(self, registry, capsys):
        result = Dispatcher(registry).run("help", prog="tool")
        assert result.status is DispatchStatus.HELP_SHOWN
        assert result.exit_code == 2
        assert capsys.readouterr().out == "cm => Commit\nhello => Hello\n"

    def test_receiver_help_exits_like_builtin(self, capsys):
        class OwnHelp:
            def Help(self):
                print("custom help")
                return 0

        result = Dispatcher(CommandRegistry.build(OwnHelp())).run("help", prog="tool")
        assert result.status is DispatchStatus.HELP_SHOWN
        assert result.exit_code == HELP_EXIT_CODE
        assert capsys.readouterr().out == "custom help\n"

    def test_exit_code_from_action(self):
        class Codes:
            def Fail(self):
                return 3

            def Ok(self):
                return True

        registry = CommandRegistry.build(Codes())
        assert Dispatcher(registry).run("fail", prog="tool").exit_code == 3
        assert Dispatcher(registry).run("ok", prog="tool").exit_code == 0

    def test_action_errors_propagate(self):
        class Boom:
            def Explode(self):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            Dispatcher(CommandRegistry.build(Boom())).run("explode", prog="tool")

    def test_added_operation(self, registry):
        calls = []
        registry.add("log", lambda: calls.append(registry.invocation.args))
        Dispatcher(registry).run("log", ["--oneline"], prog="tool")
        assert calls == [["--oneline"]]


class TestRunCmd:
    """Tests for Dispatcher.run_cmd()."""

    def test_alias_from_program_name(self, git_ops, registry):
        """tool.hello dispatches without looking at the arguments."""
        result = Dispatcher(registry).run_cmd(["/usr/local/bin/tool.hello", "cm", "x"])
        assert result.status is DispatchStatus.DISPATCHED
        assert result.alias == "hello"
        assert git_ops.calls == ["hello"]
        assert git_ops.seen_args == ["cm", "x"]
        assert registry.invocation.argv == ["/usr/local/bin/tool.hello", "cm", "x"]

    def test_alias_from_first_argument(self, git_ops, registry):
        """tool hello extra dispatches hello with argv [tool, extra]."""
        result = Dispatcher(registry).run_cmd(["tool", "hello", "extra"])
        assert result.alias == "hello"
        assert result.args == ["extra"]
        assert git_ops.calls == ["hello"]
        assert registry.invocation.argv == ["tool", "extra"]

    def test_argv_not_modified(self, registry):
        argv = ["tool", "cm", "-a"]
        Dispatcher(registry).run_cmd(argv)
        assert argv == ["tool", "cm", "-a"]

    def test_missing_alias_shows_help(self, registry, capsys):
        result = Dispatcher(registry).run_cmd(["tool"])
        assert result.status is DispatchStatus.HELP_SHOWN
        assert result.exit_code == 2
        assert capsys.readouterr().out == "cm => Commit\nhello => Hello\n"

    def test_unknown_program_suffix(self, registry, capsys):
        result = Dispatcher(registry).run_cmd(["tool.nope"])
        assert result.status is DispatchStatus.NOT_FOUND
        assert result.exit_code == 2

    def test_defaults_to_sys_argv(self, git_ops, registry, monkeypatch):
        monkeypatch.setattr("sys.argv", ["tool", "cm", "y"])
        Dispatcher(registry).run_cmd()
        assert git_ops.calls == ["commit"]
        assert git_ops.seen_args == ["y"]


class TestEndToEnd:
    """Registry, resolver and dispatcher together."""

    def test_hello_and_commit(self, capsys):
        calls = []

        class Tool:
            def Hello(self):
                calls.append("Hello")

            def CM_Commit(self):
                calls.append("CM_Commit")

        dispatcher = Dispatcher(CommandRegistry.build(Tool))
        dispatcher.run_cmd(["tool", "hello"])
        dispatcher.run_cmd(["tool.cm"])
        assert calls == ["Hello", "CM_Commit"]

        dispatcher.run_cmd(["tool", "help"])
        assert capsys.readouterr().out.splitlines() == ["cm => Commit", "hello => Hello"]
