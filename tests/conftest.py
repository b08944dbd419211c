"""Pytest fixtures for multicall tests."""

import pytest

from multicall.logging import disable_verbose
from multicall.registry import CommandRegistry, OpReceiver


class GitOps(OpReceiver):
    """Receiver with one plain and one prefixed operation."""

    def __init__(self):
        self.calls = []
        self.seen_args = None

    def Hello(self):
        self.calls.append("hello")
        self.seen_args = self.args

    def CM_Commit(self):
        self.calls.append("commit")
        self.seen_args = self.args

    def helper(self):
        raise AssertionError("helpers are not operations")

    def _private(self):
        raise AssertionError("private methods are not operations")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep the user's config file and log handlers out of the tests."""
    user_dir = tmp_path_factory.mktemp("user-config")
    monkeypatch.setattr("multicall.config.USER_CONFIG_PATH", user_dir / "config.toml")
    yield
    disable_verbose()


@pytest.fixture
def git_ops():
    return GitOps()


@pytest.fixture
def registry(git_ops):
    return CommandRegistry.build(git_ops)


@pytest.fixture
def bin_dir(tmp_path):
    """Directory holding a fake 'tool' binary."""
    tool = tmp_path / "tool"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o755)
    return tmp_path


@pytest.fixture
def git_ops_cls():
    return GitOps
