"""Base class for converters that wrap an external tool."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from schemas.config import DerivativeConfig

from ..exceptions import ToolInvocationFailed
from ..process import ProcessResult, ProcessRunner

logger = logging.getLogger(__name__)


class Converter(ABC):
    """Abstract base class for tool-backed converters.

    A converter turns local files into other local files by running one
    external tool. Tool failures are logged, recorded in ``failures`` and
    reported to the caller as a falsy result; they are never raised.

    Attributes:
        config: Tool configuration
        runner: Process runner used for every invocation
        failures: ToolInvocationFailed records, oldest first
    """

    def __init__(self, config: DerivativeConfig, runner: ProcessRunner | None = None):
        self.config = config
        self.runner = runner or ProcessRunner()
        self.failures: list[ToolInvocationFailed] = []

    @property
    @abstractmethod
    def tool(self) -> str:
        """Path of the executable this converter runs."""
        pass

    def _invoke(self, args: list[str], output: Path) -> Path | None:
        """Run the tool and accept its output file if it succeeded."""
        result = self.runner.run([self.tool, *args])
        return self._accept(result, output)

    def _accept(self, result: ProcessResult, output: Path) -> Path | None:
        """Return output if the run succeeded and produced a non-empty file.

        A failed run never leaves its output behind: any partial file is
        removed before the failure is reported.
        """
        if result.succeeded and output.is_file() and output.stat().st_size > 0:
            return output

        output.unlink(missing_ok=True)
        self._record_failure(result)
        return None

    def _record_failure(self, result: ProcessResult) -> ToolInvocationFailed:
        failure = ToolInvocationFailed(result.exit_code, result.command, result.output)
        self.failures.append(failure)
        logger.error(
            f"{self.__class__.__name__} failed (exit code {result.exit_code}): "
            f"{result.command_line}\n{result.output}"
        )
        return failure
