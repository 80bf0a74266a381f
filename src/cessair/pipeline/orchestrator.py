"""Build orchestrator — runs pipeline stages strictly in order.

Two entry points share one execution path:

- :meth:`BuildOrchestrator.full_build` runs every stage once, in
  :data:`~cessair.pipeline.stages.FULL_BUILD` order.
- :meth:`BuildOrchestrator.incremental_build` runs the stages a single
  classified change requires, re-sorted into full-build order.

Stage order is a correctness constraint, not a preference:

    ROUTE_GENERATION      the script registry imports the route module
    SCRIPT_TRANSPILE      page render loads the transpiled route module
    PAGE_RENDER
    STYLESHEET_TRANSPILE
    BUNDLE                packages the already-transpiled scripts

A stage that raises aborts the build immediately.  Nothing is rolled back
and nothing is retried; the error propagates to the caller.

Before the first build the working copy (``libraries/``) is materialized by
the checkout command if it does not exist.  That happens at most once per
orchestrator.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from cessair._errors import CessairError
from cessair.observability.collector import BuildCollector
from cessair.pipeline.render import PageRenderer
from cessair.pipeline.stages import FULL_BUILD, Stage, classify
from cessair.routing.table import build_route_table, generate_routes, inspect_tree
from cessair.tools.runner import CommandRunner, detect_package_tool

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from pathlib import PurePath

    from cessair.config import CessairConfig
    from cessair.pipeline.render import RenderedPage
    from cessair.pipeline.stages import Classification
    from cessair.routing.table import RouteTable


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Result of one completed build.

    Attributes:
        kind: ``"full"`` or ``"incremental"``.
        trigger: Changed path (relative to sources) for incremental builds.
        stages: Stages that ran, in execution order.
        duration_ms: Total wall-clock time in milliseconds.

    """

    kind: Literal["full", "incremental"]
    trigger: str
    stages: tuple[Stage, ...]
    duration_ms: float


@dataclass(slots=True)
class BuildState:
    """Mutable state owned by one orchestrator.

    Attributes:
        workspace_ready: The output working copy exists.
        routes: Route table from the most recent route generation.
        pages: Pages written by the most recent page render.
        builds: Number of builds that completed.
        failures: Number of builds aborted by a stage failure.
        last_report: Report of the most recent completed build.

    """

    workspace_ready: bool = False
    routes: RouteTable | None = None
    pages: tuple[RenderedPage, ...] = ()
    builds: int = 0
    failures: int = 0
    last_report: BuildReport | None = None


class BuildOrchestrator:
    """Runs full and incremental builds for one project.

    Args:
        config: Frozen cessair configuration.
        runner: Command runner (defaults to one rooted at ``config.root``).
        renderer: Page renderer (defaults to the command-backed renderer).
        collector: Status sink for build events.

    """

    def __init__(
        self,
        config: CessairConfig,
        *,
        runner: CommandRunner | None = None,
        renderer: PageRenderer | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self._config = config
        self._runner = runner if runner is not None else CommandRunner(config.root)
        self._package_tool = config.package_tool or detect_package_tool()
        self._renderer = (
            renderer
            if renderer is not None
            else PageRenderer(config, self._runner, self._package_tool)
        )
        self._collector = collector if collector is not None else BuildCollector()
        self._state = BuildState()
        self._handlers: dict[Stage, Callable[[], Awaitable[None]]] = {
            Stage.ROUTE_GENERATION: self._generate_routes,
            Stage.SCRIPT_TRANSPILE: self._transpile_scripts,
            Stage.PAGE_RENDER: self._render_pages,
            Stage.STYLESHEET_TRANSPILE: self._transpile_stylesheets,
            Stage.BUNDLE: self._bundle,
        }

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def package_tool(self) -> str:
        return self._package_tool

    @property
    def collector(self) -> BuildCollector:
        return self._collector

    async def ensure_workspace(self) -> None:
        """Check out the working copy into the output directory if absent.

        Raises:
            ToolFailure: If the checkout command fails.

        """
        if self._state.workspace_ready:
            return
        if not self._config.output_path.exists():
            await self._runner.run(self._command(self._config.checkout_command))
            self._collector.workspace_materialized(str(self._config.output))
        self._state.workspace_ready = True

    async def full_build(self) -> BuildReport:
        """Run every stage once, in full-build order."""
        return await self._run("full", FULL_BUILD)

    async def incremental_build(self, classification: Classification) -> BuildReport | None:
        """Run the stages *classification* requires.

        Returns None without touching anything when the change needs no
        stage.

        """
        if classification.ignored:
            return None
        return await self._run("incremental", classification.stages, str(classification.path))

    async def rebuild(self, path: PurePath | str) -> BuildReport | None:
        """Classify *path* (relative to sources) and build incrementally."""
        return await self.incremental_build(classify(path, self._config.components_dir))

    async def _run(
        self,
        kind: Literal["full", "incremental"],
        stages: tuple[Stage, ...],
        trigger: str = "",
    ) -> BuildReport:
        await self.ensure_workspace()

        ordered = tuple(sorted(set(stages)))
        t0 = time.perf_counter()

        for stage in ordered:
            self._collector.stage_started(stage, trigger)
            started = time.perf_counter()
            try:
                await self._handlers[stage]()
            except CessairError as exc:
                self._state.failures += 1
                self._collector.stage_failed(stage, exc, trigger)
                raise
            self._collector.stage_completed(
                stage, trigger, duration_ms=(time.perf_counter() - started) * 1000
            )

        report = BuildReport(
            kind=kind,
            trigger=trigger,
            stages=ordered,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
        self._state.builds += 1
        self._state.last_report = report
        self._collector.build_finished(
            kind, ordered, trigger=trigger, duration_ms=report.duration_ms
        )
        return report

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _generate_routes(self) -> None:
        self._state.routes = await asyncio.to_thread(
            generate_routes,
            self._config.components_path,
            self._config.route_module_path,
        )

    async def _transpile_scripts(self) -> None:
        await self._runner.run(self._command(self._config.transpile_command))

    async def _render_pages(self) -> None:
        routes = self._state.routes
        if routes is None:
            tree = await asyncio.to_thread(inspect_tree, self._config.components_path)
            routes = build_route_table(tree)
        self._state.pages = tuple(await self._renderer.render(routes.entries()))

    async def _transpile_stylesheets(self) -> None:
        await self._runner.run(self._command(self._config.stylesheet_command))

    async def _bundle(self) -> None:
        await self._runner.run(self._command(self._config.bundle_command))

    def _command(self, template: str) -> str:
        return template.format(
            package_tool=self._package_tool,
            output=self._config.output,
            branch=self._config.branch,
        )
