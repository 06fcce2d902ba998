"""External process invocation.

Every converter starts its tool through a ProcessRunner so that tests can
substitute a runner that records commands instead of executing them.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of a finished external process.

    Attributes:
        command: Argument list the process was started with
        exit_code: Process exit status (127 if it could not be started)
        stdout: Captured standard output
        stderr: Captured standard error
    """

    command: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class ProcessRunner:
    """Run a command to completion and capture its output."""

    def run(self, command: list[str]) -> ProcessResult:
        """Run a command, blocking until it exits.

        Args:
            command: Executable followed by its arguments

        Returns:
            ProcessResult; a command that cannot be started yields exit code 127
        """
        logger.debug(f"Running: {' '.join(command)}")
        try:
            completed = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            return ProcessResult(command=command, exit_code=127, stderr=str(e))

        return ProcessResult(
            command=command,
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


def tool_available(path: str | Path) -> bool:
    """Check that an executable exists at the given path."""
    path = Path(path)
    return path.is_file() and os.access(path, os.X_OK)
