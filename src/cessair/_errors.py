"""Cessair error hierarchy.

All cessair-specific errors inherit from CessairError for easy catching.
Each error carries the process exit code the CLI should terminate with.
"""


class CessairError(Exception):
    """Base error for all cessair operations."""

    exit_code: int = 1


class ConfigError(CessairError):
    """Invalid or missing configuration."""


class BuildIOError(CessairError):
    """Reading the source tree or writing a build artifact failed."""


class RenderError(CessairError):
    """The page render collaborator could not produce a page."""


class ToolFailure(CessairError):
    """An external command exited non-zero or could not be started.

    Attributes:
        command: The command line that was executed.
        exit_code: The command's exit code (127 when it could not be started).
        message: Captured error output, or a description of the failure.

    """

    def __init__(self, command: str, exit_code: int, message: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.message = message
        detail = f": {message.strip()}" if message.strip() else ""
        super().__init__(f"Command {command!r} failed with exit code {exit_code}{detail}")
