"""Command runner — awaitable execution of external build tools.

Every transpiler, compiler, bundler and checkout invocation goes through
:class:`CommandRunner`.  A non-zero exit or a missing executable raises
:class:`~cessair._errors.ToolFailure`; there is no retry.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import shlex
import shutil
from dataclasses import dataclass
from pathlib import Path

from cessair._errors import ToolFailure

# Exit code reported when the executable cannot be started (shell convention).
_NOT_FOUND_EXIT = 127


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a successful command.

    Attributes:
        command: The command line that ran.
        exit_code: Always 0 for a returned result.
        stdout: Captured standard output (empty unless ``capture=True``).

    """

    command: str
    exit_code: int
    stdout: str = ""


def detect_package_tool(path: str | None = None) -> str:
    """Return ``"yarn"`` when it is on *path* (default ``$PATH``), else ``"npm"``."""
    search = path if path is not None else os.environ.get("PATH", "")
    return "yarn" if shutil.which("yarn", path=search) else "npm"


class CommandRunner:
    """Runs command lines as subprocesses rooted at *cwd*.

    Output is streamed to the parent's stdout/stderr unless ``capture`` is
    requested, in which case stdout is returned and stderr is kept for the
    failure message.

    """

    def __init__(self, cwd: Path) -> None:
        self._cwd = cwd

    @property
    def cwd(self) -> Path:
        return self._cwd

    async def run(self, command: str, *, capture: bool = False) -> CommandResult:
        """Run *command* to completion.

        Raises:
            ToolFailure: If the command cannot be started or exits non-zero.

        """
        argv = shlex.split(command)
        if not argv:
            raise ToolFailure(command, _NOT_FOUND_EXIT, "empty command")

        pipe = asyncio.subprocess.PIPE if capture else None
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=self._cwd,
                stdout=pipe,
                stderr=pipe,
            )
        except OSError as exc:
            raise ToolFailure(command, _NOT_FOUND_EXIT, str(exc)) from exc

        try:
            stdout, stderr = await process.communicate()
        finally:
            # Cancelled mid-run: do not leave the tool running.
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        exit_code = _exit_code(process.returncode)

        if exit_code != 0:
            message = stderr.decode("utf-8", errors="replace") if stderr else ""
            raise ToolFailure(command, exit_code, message)

        return CommandResult(
            command=command,
            exit_code=exit_code,
            stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
        )


def _exit_code(returncode: int | None) -> int:
    """Map a subprocess return code to a shell-style exit status.

    A child killed by signal N reports ``-N``; shells report ``128 + N``.
    """
    if returncode is None:
        return 1
    if returncode < 0:
        return 128 - returncode
    return returncode
