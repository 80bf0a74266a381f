"""Page renderer — route list plus page shell to static HTML files.

For each route the external render command prints the server-rendered
markup for that location on stdout.  The markup is inserted into the page
shell (``sources/skeleton.pug``) as ``context`` and the result is written to
the output tree at the route's location::

    /Home.html       -> libraries/Home.html
    /blog/Post.html  -> libraries/blog/Post.html

Pug shells are compiled through the pypugjs Jinja2 extension; any other
suffix is rendered as a plain Jinja2 template.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, Template, TemplateError

from cessair._errors import BuildIOError, RenderError

if TYPE_CHECKING:
    from cessair.config import CessairConfig
    from cessair.routing.table import RouteEntry
    from cessair.tools.runner import CommandRunner

_PUG_EXTENSION = "pypugjs.ext.jinja.PyPugJSExtension"


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """Record of a single page written during page render."""

    location: str
    output_path: Path
    size_bytes: int


class PageRenderer:
    """Renders every route into the page shell.

    Args:
        config: Frozen cessair configuration.
        runner: Runner used for the per-route render command.
        package_tool: Value substituted for ``{package_tool}`` in the command.

    """

    def __init__(self, config: CessairConfig, runner: CommandRunner, package_tool: str) -> None:
        self._config = config
        self._runner = runner
        self._package_tool = package_tool

    async def render(self, routes: tuple[RouteEntry, ...]) -> list[RenderedPage]:
        """Render and write one HTML file per route, in route order.

        Raises:
            RenderError: If the page shell is missing or fails to render.
            ToolFailure: If the render command fails for a route.
            BuildIOError: If a page cannot be written.

        """
        shell = self._load_shell()
        pages: list[RenderedPage] = []

        for entry in routes:
            command = self._config.render_command.format(
                package_tool=self._package_tool,
                output=self._config.output,
                branch=self._config.branch,
                location=entry.location,
            )
            result = await self._runner.run(command, capture=True)

            try:
                html = shell.render(context=result.stdout).strip() + "\n"
            except TemplateError as exc:
                msg = f"Failed to render page {entry.location!r}: {exc}"
                raise RenderError(msg) from exc

            target = self._config.output_path / entry.location.lstrip("/")
            pages.append(RenderedPage(
                location=entry.location,
                output_path=target,
                size_bytes=_write_page(target, html),
            ))

        return pages

    def _load_shell(self) -> Template:
        skeleton = self._config.skeleton_path
        if not skeleton.is_file():
            msg = f"Page shell {skeleton} does not exist"
            raise RenderError(msg)

        extensions = [_PUG_EXTENSION] if skeleton.suffix == ".pug" else []
        env = Environment(
            loader=FileSystemLoader(skeleton.parent),
            extensions=extensions,
            autoescape=False,
            keep_trailing_newline=True,
        )
        try:
            return env.get_template(skeleton.name)
        except TemplateError as exc:
            msg = f"Failed to compile page shell {skeleton}: {exc}"
            raise RenderError(msg) from exc


def _write_page(target: Path, html: str) -> int:
    """Write *html* to *target*, creating parent dirs. Returns bytes written."""
    data = html.encode("utf-8")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        msg = f"Failed to write page {target}: {exc}"
        raise BuildIOError(msg) from exc
    return len(data)
