"""Pytest configuration and shared fixtures for all tests."""

import os
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

import pytest

from sbomgraph.config import Settings
from sbomgraph.tools import ToolRunner


@pytest.fixture(autouse=True)
def clear_sbomgraph_environment(monkeypatch):
    """Remove SBOMGRAPH_* variables so a developer's shell cannot leak into tests."""
    for name in list(os.environ):
        if name.startswith("SBOMGRAPH_"):
            monkeypatch.delenv(name, raising=False)


class FakeToolRunner(ToolRunner):
    """ToolRunner that answers from canned output instead of spawning processes.

    ``responses`` maps a command prefix (tuple of arguments, executable
    included) to either a string (stdout) or a callable receiving the full
    command and returning a CompletedProcess. The longest matching prefix
    wins. Every invocation is recorded in ``calls`` and its extra
    environment in ``environments``.
    """

    def __init__(self, responses: Mapping[tuple, object]):
        self.responses = dict(responses)
        self.calls: list[list[str]] = []
        self.environments: list[Optional[Mapping[str, str]]] = []

    def run(
        self,
        cmd: Sequence[str],
        command_name: str,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        cmd = list(cmd)
        self.calls.append(cmd)
        self.environments.append(env)
        matches = [prefix for prefix in self.responses if tuple(cmd[: len(prefix)]) == prefix]
        if not matches:
            raise AssertionError(f"Unexpected command: {cmd}")
        response = self.responses[max(matches, key=len)]
        if callable(response):
            return response(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout=response, stderr="")


@pytest.fixture
def fake_runner() -> Callable[[Mapping[tuple, object]], FakeToolRunner]:
    return FakeToolRunner


@pytest.fixture
def settings() -> Settings:
    return Settings()
