"""External tool invocation.

Providers never spawn processes directly; they go through a ToolRunner so
that the parsing and graph code stays free of process handling and tests
can substitute canned tool output.
"""

import os
import subprocess
import threading
import time
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .exceptions import CommandExecutionError
from .logging_config import logger

# Progress indicator interval in seconds
PROGRESS_INTERVAL = 60


def log_command_error(command_name: str, stderr: str) -> None:
    """
    Log command errors with a standardized format.

    Args:
        command_name: The name of the command that failed
        stderr: The stderr output from the command
    """
    if stderr:
        logger.error(f"[{command_name}] error: {stderr.strip()}")


def run_command(
    cmd: Sequence[str],
    command_name: str,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess:
    """
    Run a command and handle common error cases.

    No timeout is applied unless the caller passes one. For long-running
    commands, progress is logged every PROGRESS_INTERVAL seconds.

    Args:
        cmd: Command to run as a list
        command_name: Name of the command for error reporting
        cwd: Working directory for the command (optional)
        env: Extra environment variables merged over os.environ
        check: Raise on a non-zero exit code
        timeout: Command timeout in seconds (optional)

    Returns:
        CompletedProcess result with text stdout/stderr

    Raises:
        CommandExecutionError: If the command fails, times out or is missing
    """
    cwd_info = f" (cwd: {cwd})" if cwd else ""
    logger.debug(f"Running command: {' '.join(cmd)}{cwd_info}")

    start_time = time.time()
    stop_progress = threading.Event()

    def log_progress():
        while not stop_progress.wait(PROGRESS_INTERVAL):
            elapsed = int(time.time() - start_time)
            logger.info(f"{command_name} still running... ({elapsed // 60}m {elapsed % 60}s elapsed)")

    progress_thread = threading.Thread(target=log_progress, daemon=True)
    progress_thread.start()

    full_env = {**os.environ, **env} if env else None
    try:
        return subprocess.run(
            list(cmd),
            capture_output=True,
            check=check,
            text=True,
            shell=False,
            timeout=timeout,
            cwd=str(cwd) if cwd else None,
            env=full_env,
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"{command_name} command failed with return code {e.returncode}")
        log_command_error(command_name, e.stderr or "")
        raise CommandExecutionError(
            f"{command_name} command failed with return code {e.returncode}: {(e.stderr or '').strip()}",
            stderr=e.stderr or "",
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CommandExecutionError(f"{command_name} command timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise CommandExecutionError(f"{command_name} command not found - is it installed?") from e
    finally:
        stop_progress.set()
        progress_thread.join(timeout=1)


class ToolRunner:
    """Runs external build and package-manager tools."""

    def run(
        self,
        cmd: Sequence[str],
        command_name: str,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        return run_command(cmd, command_name, cwd=cwd, env=env, check=check)

    def output(
        self,
        cmd: Sequence[str],
        command_name: str,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Run a command and return its stdout."""
        return self.run(cmd, command_name, cwd=cwd, env=env).stdout
