"""Cessair configuration.

CessairConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class CessairConfig:
    """Configuration for a cessair build.

    Attributes:
        root: Path to the project root (contains sources/ and package.json).
              Always resolved to an absolute path on construction.
        sources_dir: Directory containing page components, stylesheets and
            the page shell.
        components_dir: Directory under ``sources_dir`` holding the page
            components that become routes.
        output: Working-copy directory that receives every build artifact.
        route_module: File name of the generated route module, written into
            ``sources_dir``.
        skeleton: File name of the page shell template inside ``sources_dir``.
        branch: Branch checked out when materializing the working copy.
        checkout_command: Command that materializes the working copy.
        transpile_command: Command that transpiles scripts.
        stylesheet_command: Command that compiles stylesheets.
        bundle_command: Command that bundles the transpiled scripts.
        render_command: Command that prints server-rendered markup for one
            route location on stdout.
        package_tool: ``yarn`` or ``npm``; auto-detected from ``PATH`` when None.
        queue_size: Capacity of the watch event queue.
        debounce_ms: Filesystem event debounce window in watch mode.

    Command templates may reference ``{package_tool}``, ``{output}``,
    ``{branch}`` and (render only) ``{location}``.

    """

    root: Path = field(default_factory=Path.cwd)
    sources_dir: str = "sources"
    components_dir: str = "components"
    output: Path = field(default_factory=lambda: Path("libraries"))
    route_module: str = "routing.js"
    skeleton: str = "skeleton.pug"
    branch: str = "master"
    checkout_command: str = "git clone --branch {branch} . {output}"
    transpile_command: str = "{package_tool} run build:babel"
    stylesheet_command: str = "{package_tool} run build:scss"
    bundle_command: str = "{package_tool} run build:webpack"
    render_command: str = "node {output}/transpiled/render.js {location}"
    package_tool: str | None = None
    queue_size: int = 64
    debounce_ms: int = 300

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def sources_path(self) -> Path:
        """Absolute path to the sources directory."""
        return self.root / self.sources_dir

    @property
    def components_path(self) -> Path:
        """Absolute path to the components directory."""
        return self.sources_path / self.components_dir

    @property
    def route_module_path(self) -> Path:
        """Absolute path to the generated route module."""
        return self.sources_path / self.route_module

    @property
    def skeleton_path(self) -> Path:
        """Absolute path to the page shell template."""
        return self.sources_path / self.skeleton

    @property
    def output_path(self) -> Path:
        """Absolute path to the output working copy."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output
