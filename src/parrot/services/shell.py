"""Shell command executor service."""

from __future__ import annotations

import logging
import subprocess

from parrot.config import AppConfig
from parrot.errors import ExecutionError
from parrot.storage.models import ExecutionResult

logger = logging.getLogger(__name__)


class ShellRunner:
    """Execute shell commands and capture their raw output.

    There is no timeout: a command that never exits blocks the caller.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def execute(self, command: str) -> ExecutionResult:
        """Execute a shell command."""
        logger.debug("Executing: %s", command)
        try:
            proc = subprocess.run(
                command,
                shell=True,
                executable=self.config.shell.executable or None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            logger.exception("Shell execution error")
            raise ExecutionError(f"Unable to run '{command}': {e}") from e

        # Negative return codes mean the child was killed by a signal.
        exit_code = proc.returncode if proc.returncode >= 0 else None
        logger.debug("Exit code for '%s': %s", command, exit_code)
        return ExecutionResult(stdout=proc.stdout, stderr=proc.stderr, exit_code=exit_code)
