"""Tests for external tool invocation."""

import subprocess
from unittest.mock import patch

import pytest

from sbomgraph.exceptions import CommandExecutionError
from sbomgraph.tools import ToolRunner, run_command


class TestRunCommand:
    """Tests for run_command error mapping."""

    def test_success(self):
        completed = subprocess.CompletedProcess(["go", "version"], 0, stdout="go1.21\n", stderr="")
        with patch("sbomgraph.tools.subprocess.run", return_value=completed) as mock_run:
            result = run_command(["go", "version"], "go")
        assert result.stdout == "go1.21\n"
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["shell"] is False
        assert kwargs["env"] is None

    def test_extra_environment_is_merged(self, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        completed = subprocess.CompletedProcess(["go"], 0, stdout="", stderr="")
        with patch("sbomgraph.tools.subprocess.run", return_value=completed) as mock_run:
            run_command(["go"], "go", env={"GOFLAGS": "-mod=mod"})
        env = mock_run.call_args.kwargs["env"]
        assert env["GOFLAGS"] == "-mod=mod"
        assert env["PATH"] == "/usr/bin"

    def test_non_zero_exit(self):
        error = subprocess.CalledProcessError(1, ["mvn"], output="", stderr="BUILD FAILURE")
        with patch("sbomgraph.tools.subprocess.run", side_effect=error):
            with pytest.raises(CommandExecutionError, match="BUILD FAILURE") as exc_info:
                run_command(["mvn"], "mvn")
        assert exc_info.value.stderr == "BUILD FAILURE"

    def test_timeout(self):
        with patch("sbomgraph.tools.subprocess.run", side_effect=subprocess.TimeoutExpired(["go"], 5)):
            with pytest.raises(CommandExecutionError, match="timed out"):
                run_command(["go"], "go", timeout=5)

    def test_missing_executable(self):
        with patch("sbomgraph.tools.subprocess.run", side_effect=FileNotFoundError("pnpm")):
            with pytest.raises(CommandExecutionError, match="not found") as exc_info:
                run_command(["pnpm"], "pnpm")
        assert exc_info.value.stderr == ""


class TestToolRunner:
    """Tests for the ToolRunner wrapper."""

    def test_output_returns_stdout(self):
        completed = subprocess.CompletedProcess(["yarn", "-v"], 0, stdout="1.22.19\n", stderr="")
        with patch("sbomgraph.tools.subprocess.run", return_value=completed):
            assert ToolRunner().output(["yarn", "-v"], "yarn") == "1.22.19\n"

    def test_run_passes_check_flag(self):
        completed = subprocess.CompletedProcess(["npm"], 1, stdout="{}", stderr="")
        with patch("sbomgraph.tools.subprocess.run", return_value=completed) as mock_run:
            assert ToolRunner().run(["npm"], "npm", check=False).returncode == 1
        assert mock_run.call_args.kwargs["check"] is False
