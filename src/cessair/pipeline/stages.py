"""Pipeline stages and the stage classifier.

The full build runs every :class:`Stage` in enum order.  An incremental
build runs the stages a single changed file implies, looked up from a
fixed table keyed by the file's :class:`FileCategory`:

    ========================  ===============================================
    Category                  Stages
    ========================  ===============================================
    PAGE_TEMPLATE (.pug)      PAGE_RENDER
    STYLESHEET (.scss)        STYLESHEET_TRANSPILE
    SCRIPT (.js/.jsx)         SCRIPT_TRANSPILE, BUNDLE
    component SCRIPT          ROUTE_GENERATION, SCRIPT_TRANSPILE, BUNDLE
    OTHER                     (none)
    ========================  ===============================================

Classification never inspects file contents.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import PurePath, PurePosixPath


class Stage(IntEnum):
    """A pipeline stage.  Integer value is its position in the full build."""

    ROUTE_GENERATION = 1
    SCRIPT_TRANSPILE = 2
    PAGE_RENDER = 3
    STYLESHEET_TRANSPILE = 4
    BUNDLE = 5

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]


_STAGE_LABELS: dict[Stage, str] = {
    Stage.ROUTE_GENERATION: "Generate routing configuration",
    Stage.SCRIPT_TRANSPILE: "Transpile ES2015 modules to CommonJS",
    Stage.PAGE_RENDER: "Generate pages",
    Stage.STYLESHEET_TRANSPILE: "Transpile SCSS to CSS",
    Stage.BUNDLE: "Make bundle of application",
}

FULL_BUILD: tuple[Stage, ...] = tuple(Stage)


class FileCategory(Enum):
    """Closed set of source file kinds the pipeline distinguishes."""

    PAGE_TEMPLATE = "page_template"
    STYLESHEET = "stylesheet"
    SCRIPT = "script"
    OTHER = "other"


_CATEGORY_SUFFIXES: dict[FileCategory, frozenset[str]] = {
    FileCategory.PAGE_TEMPLATE: frozenset({".pug"}),
    FileCategory.STYLESHEET: frozenset({".scss"}),
    FileCategory.SCRIPT: frozenset({".js", ".jsx"}),
}

WATCHED_SUFFIXES: frozenset[str] = frozenset().union(*_CATEGORY_SUFFIXES.values())

_STAGES_BY_CATEGORY: dict[FileCategory, tuple[Stage, ...]] = {
    FileCategory.PAGE_TEMPLATE: (Stage.PAGE_RENDER,),
    FileCategory.STYLESHEET: (Stage.STYLESHEET_TRANSPILE,),
    FileCategory.SCRIPT: (Stage.SCRIPT_TRANSPILE, Stage.BUNDLE),
    FileCategory.OTHER: (),
}


@dataclass(frozen=True, slots=True)
class Classification:
    """Stages a single changed file requires.

    Attributes:
        path: The classified path, relative to the sources directory.
        category: Which kind of source file it is.
        stages: Stages to run, always in full-build order.
        regenerate_routes: True when the route table must be rebuilt first.

    """

    path: PurePosixPath
    category: FileCategory
    stages: tuple[Stage, ...]
    regenerate_routes: bool

    @property
    def ignored(self) -> bool:
        return not self.stages


def categorize(path: PurePath) -> FileCategory:
    """Map a path to its :class:`FileCategory` by suffix."""
    # Dict order is the match priority.
    for category, suffixes in _CATEGORY_SUFFIXES.items():
        if path.suffix in suffixes:
            return category
    return FileCategory.OTHER


def classify(path: PurePath | str, components_dir: str = "components") -> Classification:
    """Determine which stages must re-run for a changed file.

    *path* is relative to the sources directory (``components/About.jsx``,
    ``app.scss``).  A script under *components_dir* changes the route
    table, so route generation runs ahead of the script stages.

    """
    rel = PurePosixPath(PurePath(path).as_posix())
    category = categorize(rel)
    stages = _STAGES_BY_CATEGORY[category]

    regenerate = category is FileCategory.SCRIPT and _under(rel, components_dir)
    if regenerate:
        stages = (Stage.ROUTE_GENERATION, *stages)

    return Classification(
        path=rel,
        category=category,
        stages=stages,
        regenerate_routes=regenerate,
    )


def _under(path: PurePosixPath, directory: str) -> bool:
    prefix = PurePosixPath(directory).parts
    return path.parts[: len(prefix)] == prefix and len(path.parts) > len(prefix)
