"""Shared test fixtures for cessair."""

from __future__ import annotations

from pathlib import Path

import pytest

from cessair._errors import ToolFailure
from cessair.config import CessairConfig
from cessair.observability import BuildCollector, EventLog
from cessair.tools.runner import CommandResult


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal project structure for testing.

    Returns the project root with sources/components/{Home.jsx, blog/Post.jsx},
    a plain Jinja2 page shell, a stylesheet, an application script and an
    already-materialized ``libraries/`` working copy.
    """
    sources = tmp_path / "sources"
    components = sources / "components"
    (components / "blog").mkdir(parents=True)
    (components / "Home.jsx").write_text("export default () => 'home';\n")
    (components / "blog" / "Post.jsx").write_text("export default () => 'post';\n")
    (components / "blog" / "notes.md").write_text("# not a component\n")

    (sources / "skeleton.html").write_text(
        "<!DOCTYPE html>\n<html>\n<body><div id=\"context\">{{ context }}</div></body>\n</html>\n"
    )
    (sources / "app.scss").write_text("body { margin: 0; }\n")
    (sources / "application.js").write_text("import Routes from './routing';\n")

    (tmp_path / "libraries").mkdir()
    return tmp_path


@pytest.fixture
def config(tmp_project: Path) -> CessairConfig:
    """A CessairConfig for tmp_project with a fixed package tool."""
    return CessairConfig(root=tmp_project, skeleton="skeleton.html", package_tool="yarn")


@pytest.fixture
def collector() -> BuildCollector:
    """A silent collector with its own event log."""
    return BuildCollector(EventLog(), verbose=False)


class FakeRunner:
    """Records commands instead of running them.

    Commands containing any of ``fail_on`` raise ToolFailure with exit code
    ``exit_code``.  Captured runs return ``stdout`` with ``{command}``
    replaced by the command line.
    """

    def __init__(
        self,
        *,
        fail_on: tuple[str, ...] = (),
        exit_code: int = 2,
        stdout: str = "<main>{command}</main>",
    ) -> None:
        self.commands: list[str] = []
        self.fail_on = fail_on
        self.exit_code = exit_code
        self.stdout = stdout

    async def run(self, command: str, *, capture: bool = False) -> CommandResult:
        self.commands.append(command)
        if any(marker in command for marker in self.fail_on):
            raise ToolFailure(command, self.exit_code, "boom")
        out = self.stdout.format(command=command) if capture else ""
        return CommandResult(command=command, exit_code=0, stdout=out)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
