"""Cessair application — entry points for one-shot and watch builds.

The public functions (build, yarnpm) are the primary entry points.  Each
loads configuration, wires the orchestrator and runs it on a fresh event
loop.
"""

from __future__ import annotations

import asyncio
import shlex
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from cessair._errors import ToolFailure
from cessair.banner import print_banner
from cessair.config_loader import load_config
from cessair.observability import BuildCollector, EventLog
from cessair.pipeline.orchestrator import BuildOrchestrator
from cessair.tools.runner import CommandRunner, detect_package_tool

if TYPE_CHECKING:
    from cessair.config import CessairConfig
    from cessair.pipeline.orchestrator import BuildReport


def _create_orchestrator(config: CessairConfig) -> BuildOrchestrator:
    """Wire an orchestrator with a collector that prints to stderr."""
    collector = BuildCollector(EventLog())
    return BuildOrchestrator(config, collector=collector)


async def _watch(config: CessairConfig, orchestrator: BuildOrchestrator) -> None:
    """Full build, then rebuild on every relevant change until cancelled.

    The fingerprint cache starts empty, so a restart always rebuilds in
    full rather than resuming.  A failing initial build aborts before any
    watching starts.

    """
    from cessair.watch.loop import WatchLoop
    from cessair.watch.watcher import SourceWatcher

    await orchestrator.full_build()

    loop = WatchLoop(config, orchestrator)
    await loop.run(SourceWatcher(config))


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build(root: str | Path = ".", *, watch: bool = False, **kwargs: object) -> BuildReport | None:
    """Build the site, optionally watching for changes afterwards.

    Materializes the working copy if needed, then runs every stage in
    order: route generation, script transpile, page render, stylesheet
    transpile and bundle.  With ``watch=True`` the process then keeps
    rebuilding incrementally until interrupted and returns None.

    Args:
        root: Path to the project root.
        watch: Keep watching sources and build incrementally.
        **kwargs: Override CessairConfig fields.

    Raises:
        CessairError: On the first failing stage of a full build; nothing
            after it runs.

    """
    config = load_config(Path(root), **kwargs)
    orchestrator = _create_orchestrator(config)

    print_banner(config, "watch" if watch else "build", package_tool=orchestrator.package_tool)

    if not watch:
        return asyncio.run(orchestrator.full_build())

    try:
        asyncio.run(_watch(config, orchestrator))
    except KeyboardInterrupt:
        by_type = orchestrator.collector.log.stats()["by_type"]
        print(
            f"\n  Stopped watching after {by_type.get('BuildFinished', 0)} builds"
            f" ({by_type.get('StageFailed', 0)} failed).",
            file=sys.stderr,
        )
    return None


def yarnpm(commands: list[str], root: str | Path = ".") -> int:
    """Run *commands* through yarn when available, otherwise npm.

    Output is streamed straight to the terminal.

    Returns:
        The package tool's exit code.

    """
    command = shlex.join([detect_package_tool(), *commands])
    runner = CommandRunner(Path(root).resolve())
    try:
        asyncio.run(runner.run(command))
    except ToolFailure as exc:
        return exc.exit_code
    return 0
