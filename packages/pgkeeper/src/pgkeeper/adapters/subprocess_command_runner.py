"""subprocess-based implementation of the CommandRunnerPort."""

from __future__ import annotations

import logging
import subprocess

from pgkeeper.adapters.ports import CommandRunnerPort

logger = logging.getLogger(__name__)


class SubprocessCommandRunner:
    """Runs shell commands with subprocess.

    The command string is handed to the shell unchanged, so operators can
    configure pipelines and redirections in post_promotion_command.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the runner.

        Args:
            timeout: Optional bound in seconds for each command. None waits forever.
        """
        self._timeout = timeout

    def run(self, command: str) -> int:
        """Run ``command`` and return its exit status.

        Raises:
            OSError: If the shell cannot be launched.
            subprocess.TimeoutExpired: If the command exceeds the timeout.
        """
        logger.info(f"Executing external command: {command!r}")
        completed = subprocess.run(
            command,
            shell=True,
            check=False,
            capture_output=True,
            text=True,
            timeout=self._timeout,
        )
        if completed.stdout:
            logger.info(f"{command!r} stdout: {completed.stdout.strip()}")
        if completed.stderr:
            logger.warning(f"{command!r} stderr: {completed.stderr.strip()}")
        return completed.returncode


# Runtime protocol check
assert isinstance(
    SubprocessCommandRunner.__new__(SubprocessCommandRunner), CommandRunnerPort
), "SubprocessCommandRunner must implement CommandRunnerPort"
