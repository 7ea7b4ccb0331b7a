"""Custom exceptions for go-debian-tools."""


class PackagingToolError(Exception):
    """Base exception for all go-debian-tools errors."""

    pass


class ToolInvocationError(PackagingToolError):
    """Raised when an external command exits with a non-zero status.

    The command line, exit status and captured stderr are kept so callers
    can decide whether to abort or report and continue.
    """

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"{' '.join(command)} exited with status {returncode}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)


class GitCommandError(ToolInvocationError):
    """Raised when a git invocation fails."""

    pass


class GoToolError(ToolInvocationError):
    """Raised when a go toolchain invocation fails."""

    pass


class GbpCommandError(ToolInvocationError):
    """Raised when a git-buildpackage invocation fails."""

    pass


class OutputFormatError(PackagingToolError):
    """Raised when an external tool produced output we cannot parse.

    For example a `git describe --long` string that does not end in
    `-<count>-g<hash>`, or a `go mod graph` line without two fields.
    """

    pass


class ArchiveError(PackagingToolError):
    """Raised when the Debian archive API cannot be queried or decoded."""

    pass


class SettingsError(PackagingToolError):
    """Raised when the settings file is unreadable or invalid."""

    pass
