"""Tests for cessair.pipeline.orchestrator — ordered stage execution."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from cessair._errors import BuildIOError, ToolFailure
from cessair.config import CessairConfig
from cessair.observability import BuildCollector, BuildFinished, StageFailed, StageStarted
from cessair.pipeline.orchestrator import BuildOrchestrator
from cessair.pipeline.stages import FULL_BUILD, Stage, classify

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def orchestrator(config: CessairConfig, runner, collector: BuildCollector) -> BuildOrchestrator:
    return BuildOrchestrator(config, runner=runner, collector=collector)


def _events(collector: BuildCollector, event_type: type) -> list:
    return [e for e in collector.log.recent(len(collector.log)) if isinstance(e, event_type)]


def _started(collector: BuildCollector) -> list[str]:
    return [e.stage for e in _events(collector, StageStarted)]


# ---------------------------------------------------------------------------
# Full build
# ---------------------------------------------------------------------------


class TestFullBuild:
    """All five stages, once, in order."""

    @pytest.mark.asyncio
    async def test_runs_every_stage_in_order(
        self, orchestrator: BuildOrchestrator, collector: BuildCollector
    ) -> None:
        report = await orchestrator.full_build()

        assert report.kind == "full"
        assert report.stages == FULL_BUILD
        assert _started(collector) == [s.name for s in FULL_BUILD]

    @pytest.mark.asyncio
    async def test_external_commands(self, orchestrator: BuildOrchestrator, runner) -> None:
        await orchestrator.full_build()

        assert runner.commands == [
            "yarn run build:babel",
            "node libraries/transpiled/render.js /Home.html",
            "node libraries/transpiled/render.js /blog/Post.html",
            "yarn run build:scss",
            "yarn run build:webpack",
        ]

    @pytest.mark.asyncio
    async def test_writes_route_module_and_pages(
        self, orchestrator: BuildOrchestrator, config: CessairConfig
    ) -> None:
        await orchestrator.full_build()

        module = config.route_module_path.read_text()
        assert "import BlogPost from './components/blog/Post';" in module

        home = (config.output_path / "Home.html").read_text()
        assert '<div id="context"><main>node libraries/transpiled/render.js /Home.html</main></div>' in home
        assert home.endswith("</html>\n")
        assert (config.output_path / "blog" / "Post.html").is_file()

    @pytest.mark.asyncio
    async def test_state_records_build(
        self, orchestrator: BuildOrchestrator, config: CessairConfig
    ) -> None:
        report = await orchestrator.full_build()

        state = orchestrator.state
        assert state.builds == 1
        assert state.failures == 0
        assert state.last_report == report
        assert state.routes is not None
        assert state.routes.as_dict() == {"Home": "Home", "BlogPost": "blog/Post"}
        assert [p.location for p in state.pages] == ["/Home.html", "/blog/Post.html"]
        assert state.pages[0].output_path == config.output_path / "Home.html"

    @pytest.mark.asyncio
    async def test_emits_build_finished(
        self, orchestrator: BuildOrchestrator, collector: BuildCollector
    ) -> None:
        await orchestrator.full_build()
        (finished,) = _events(collector, BuildFinished)
        assert finished.kind == "full"
        assert finished.stages == tuple(s.name for s in FULL_BUILD)


class TestFailure:
    """A failing stage aborts the build."""

    @pytest.mark.asyncio
    async def test_tool_failure_aborts_remaining_stages(
        self, orchestrator: BuildOrchestrator, runner, collector: BuildCollector
    ) -> None:
        runner.fail_on = ("build:babel",)

        with pytest.raises(ToolFailure) as excinfo:
            await orchestrator.full_build()

        assert excinfo.value.exit_code == 2
        assert runner.commands == ["yarn run build:babel"]
        assert _started(collector) == ["ROUTE_GENERATION", "SCRIPT_TRANSPILE"]

        (failed,) = _events(collector, StageFailed)
        assert failed.stage == "SCRIPT_TRANSPILE"
        assert failed.exit_code == 2
        assert _events(collector, BuildFinished) == []

    @pytest.mark.asyncio
    async def test_failure_counts_and_no_rollback(
        self, orchestrator: BuildOrchestrator, runner, config: CessairConfig
    ) -> None:
        runner.fail_on = ("build:webpack",)

        with pytest.raises(ToolFailure):
            await orchestrator.full_build()

        assert orchestrator.state.failures == 1
        assert orchestrator.state.builds == 0
        # Artifacts of earlier stages stay in place.
        assert config.route_module_path.is_file()
        assert (config.output_path / "Home.html").is_file()

    @pytest.mark.asyncio
    async def test_missing_components_is_io_failure(
        self, orchestrator: BuildOrchestrator, config: CessairConfig, runner
    ) -> None:
        shutil.rmtree(config.components_path)

        with pytest.raises(BuildIOError):
            await orchestrator.full_build()
        assert runner.commands == []


# ---------------------------------------------------------------------------
# Incremental build
# ---------------------------------------------------------------------------


class TestIncrementalBuild:
    """Only the stages a change implies, in full-build order."""

    @pytest.mark.asyncio
    async def test_component_script(
        self, orchestrator: BuildOrchestrator, runner, collector: BuildCollector
    ) -> None:
        report = await orchestrator.rebuild("components/About.jsx")

        assert report is not None
        assert report.kind == "incremental"
        assert report.trigger == "components/About.jsx"
        assert report.stages == (Stage.ROUTE_GENERATION, Stage.SCRIPT_TRANSPILE, Stage.BUNDLE)
        assert runner.commands == ["yarn run build:babel", "yarn run build:webpack"]

    @pytest.mark.asyncio
    async def test_plain_script(self, orchestrator: BuildOrchestrator, config: CessairConfig) -> None:
        report = await orchestrator.rebuild("application.js")

        assert report is not None
        assert report.stages == (Stage.SCRIPT_TRANSPILE, Stage.BUNDLE)
        assert not config.route_module_path.exists()

    @pytest.mark.asyncio
    async def test_stylesheet(self, orchestrator: BuildOrchestrator, runner) -> None:
        await orchestrator.rebuild("app.scss")
        assert runner.commands == ["yarn run build:scss"]

    @pytest.mark.asyncio
    async def test_page_template_without_prior_routes(
        self, orchestrator: BuildOrchestrator, runner, config: CessairConfig
    ) -> None:
        report = await orchestrator.rebuild("skeleton.pug")

        assert report is not None
        assert report.stages == (Stage.PAGE_RENDER,)
        assert len(runner.commands) == 2
        assert (config.output_path / "blog" / "Post.html").is_file()
        # Routes are derived, not written.
        assert not config.route_module_path.exists()

    @pytest.mark.asyncio
    async def test_page_render_uses_last_generated_routes(
        self, orchestrator: BuildOrchestrator, runner, config: CessairConfig
    ) -> None:
        await orchestrator.rebuild("components/Home.jsx")
        (config.components_path / "Late.jsx").write_text("")
        runner.commands.clear()

        await orchestrator.rebuild("skeleton.pug")

        assert runner.commands == [
            "node libraries/transpiled/render.js /Home.html",
            "node libraries/transpiled/render.js /blog/Post.html",
        ]

    @pytest.mark.asyncio
    async def test_ignored_change_runs_nothing(
        self, orchestrator: BuildOrchestrator, runner
    ) -> None:
        assert await orchestrator.incremental_build(classify("notes.txt")) is None
        assert runner.commands == []
        assert orchestrator.state.builds == 0


# ---------------------------------------------------------------------------
# Working copy
# ---------------------------------------------------------------------------


class TestWorkspace:
    """The output working copy is checked out at most once."""

    @pytest.mark.asyncio
    async def test_checkout_when_missing(
        self, orchestrator: BuildOrchestrator, runner, config: CessairConfig
    ) -> None:
        shutil.rmtree(config.output_path)

        await orchestrator.rebuild("app.scss")
        await orchestrator.rebuild("app.scss")

        assert runner.commands == [
            "git clone --branch master . libraries",
            "yarn run build:scss",
            "yarn run build:scss",
        ]
        assert orchestrator.state.workspace_ready is True

    @pytest.mark.asyncio
    async def test_existing_output_skips_checkout(
        self, orchestrator: BuildOrchestrator, runner
    ) -> None:
        await orchestrator.ensure_workspace()
        assert runner.commands == []
        assert orchestrator.state.workspace_ready is True

    @pytest.mark.asyncio
    async def test_checkout_failure_propagates(
        self, orchestrator: BuildOrchestrator, runner, config: CessairConfig
    ) -> None:
        shutil.rmtree(config.output_path)
        runner.fail_on = ("git clone",)
        runner.exit_code = 128

        with pytest.raises(ToolFailure) as excinfo:
            await orchestrator.full_build()

        assert excinfo.value.exit_code == 128
        assert orchestrator.state.workspace_ready is False


class TestConfiguration:
    def test_package_tool_from_config(
        self, config: CessairConfig, runner, collector: BuildCollector
    ) -> None:
        orchestrator = BuildOrchestrator(config, runner=runner, collector=collector)
        assert orchestrator.package_tool == "yarn"

    @pytest.mark.asyncio
    async def test_custom_commands(self, tmp_project: Path, runner, collector: BuildCollector) -> None:
        config = CessairConfig(
            root=tmp_project,
            skeleton="skeleton.html",
            package_tool="npm",
            stylesheet_command="sass sources/app.scss {output}/app.css",
        )
        orchestrator = BuildOrchestrator(config, runner=runner, collector=collector)
        await orchestrator.rebuild("app.scss")
        assert runner.commands == ["sass sources/app.scss libraries/app.css"]
