"""Startup banner and status lines — mode-aware stderr output.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from cessair._types import BuildMode
    from cessair.config import CessairConfig


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""


_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "watch": (_GREEN, "watch"),
}

# Status line markers: (color, glyph)
_STATUS_MARKS: dict[str, tuple[str, str]] = {
    "start": (_CYAN, "›"),
    "ok": (_GREEN, "✓"),
    "fail": (_RED, "✗"),
    "skip": (_DIM, "·"),
}


def _mode_badge(mode: str) -> str:
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def format_status(kind: str, message: str, detail: str = "") -> str:
    """Format one status line, e.g. ``  ✓ Generate pages (12ms)``."""
    color, glyph = _STATUS_MARKS.get(kind, (_DIM, " "))
    suffix = f" {_DIM}{detail}{_RESET}" if detail else ""
    return f"  {color}{glyph}{_RESET} {message}{suffix}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: CessairConfig,
    mode: BuildMode,
    *,
    package_tool: str,
    stream: TextIO | None = None,
) -> None:
    """Print the startup banner to stderr.

    Args:
        config: The active configuration.
        mode: ``"build"`` or ``"watch"``.
        package_tool: Detected or configured package tool.
        stream: Output stream (defaults to ``sys.stderr``).

    """
    from cessair import __version__

    out = stream if stream is not None else sys.stderr
    lines = [
        "",
        f"  {_BOLD}cessair{_RESET} {_DIM}v{__version__}{_RESET} {_mode_badge(mode)}",
        "",
        f"  {_DIM}Sources{_RESET}     {config.sources_path}",
        f"  {_DIM}Components{_RESET}  {config.components_path}",
        f"  {_DIM}Output{_RESET}      {config.output_path}",
        f"  {_DIM}Tool{_RESET}        {package_tool}",
        "",
    ]
    if mode == "watch":
        lines.append(f"  {_DIM}Watching for changes. Press Ctrl+C to stop.{_RESET}")
        lines.append("")
    print("\n".join(lines), file=out)
