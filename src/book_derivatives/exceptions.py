"""Exceptions raised while deriving book and page artifacts."""


class DerivativeError(Exception):
    """Base exception for all derivative errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ToolUnavailable(DerivativeError):
    """Raised when a required executable is not installed."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Executable not available: {tool}")


class SourceMissing(DerivativeError):
    """Raised when the source datastream of a derivative is absent."""

    def __init__(self, pid: str, dsid: str):
        self.pid = pid
        self.dsid = dsid
        super().__init__(f"Object {pid} has no {dsid} datastream")


class ToolInvocationFailed(DerivativeError):
    """Raised when an external tool exits non-zero or reports failure."""

    def __init__(self, exit_code: int, command: list[str], output: str = ""):
        self.exit_code = exit_code
        self.command = command
        self.output = output
        super().__init__(
            f"Command failed with exit code {exit_code}: {' '.join(command)}"
        )


class MalformedHocrInput(DerivativeError):
    """Raised when HOCR output cannot be parsed as XML."""

    pass


class UnknownDerivativeKind(DerivativeError):
    """Raised when a derivative kind has no source mapping."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown derivative kind: {kind}")
