"""Route table generator — components tree to route module.

Every ``.js``/``.jsx`` file under the components directory becomes one
route.  The route path is the file's posix path relative to the components
directory with the extension stripped; the identifier is derived from that
path by :func:`pascalize`::

    components/Home.jsx        -> Home      /Home.html
    components/blog/Post.jsx   -> BlogPost  /blog/Post.html

The table is rebuilt from scratch on every call.  Output is deterministic:
siblings are visited in sorted name order, so an unchanged tree always
serializes to byte-identical text.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Literal

from cessair._errors import BuildIOError

if TYPE_CHECKING:
    from cessair._types import RouteIdentifier, RouteLocation, RoutePath

SCRIPT_SUFFIXES: frozenset[str] = frozenset({".js", ".jsx"})

_NON_LETTERS = re.compile(r"[^A-Za-z]+")


@dataclass(frozen=True, slots=True)
class TreeNode:
    """A directory listing node.

    Attributes:
        name: File or directory name (no path).
        type: ``"file"`` or ``"dir"``.
        children: Ordered child nodes (directories only).

    """

    name: str
    type: Literal["file", "dir"]
    children: tuple[TreeNode, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One page component exposed as a route."""

    identifier: RouteIdentifier
    path: RoutePath

    @property
    def location(self) -> RouteLocation:
        """URL of the rendered page (e.g. ``/blog/Post.html``)."""
        return f"/{self.path}.html"


@dataclass(slots=True)
class RouteTable:
    """Ordered mapping from identifier to route path.

    Insertion order is the depth-first traversal order of the components
    tree.  Re-inserting an identifier replaces its path but keeps its
    original position; the replaced paths are recorded in ``collisions``.

    """

    _paths: dict[RouteIdentifier, RoutePath] = field(default_factory=dict)
    collisions: list[tuple[RouteIdentifier, RoutePath, RoutePath]] = field(
        default_factory=list
    )

    def add(self, identifier: RouteIdentifier, path: RoutePath) -> None:
        previous = self._paths.get(identifier)
        if previous is not None and previous != path:
            self.collisions.append((identifier, previous, path))
        self._paths[identifier] = path

    def entries(self) -> tuple[RouteEntry, ...]:
        return tuple(RouteEntry(identifier=k, path=v) for k, v in self._paths.items())

    def as_dict(self) -> dict[RouteIdentifier, RoutePath]:
        return dict(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._paths


def pascalize(source: str) -> str:
    """Derive a code-safe PascalCase identifier from a route path.

    Every run of characters that is not an ASCII letter (whitespace,
    separators, digits, punctuation) is a token boundary.  Each token gets
    its first letter uppercased and the tokens are joined::

        "blog/Post"           -> "BlogPost"
        "blog/post"           -> "BlogPost"
        "news/2024-recap_v2"  -> "NewsRecapV"

    Returns an empty string when the input contains no letters.

    """
    tokens = _NON_LETTERS.split(source.strip())
    return "".join(token[:1].upper() + token[1:] for token in tokens if token)


def inspect_tree(directory: Path) -> TreeNode:
    """Recursively list *directory* as a :class:`TreeNode`.

    Children are sorted by name so traversal order is stable across
    platforms and filesystems.

    Raises:
        BuildIOError: If the directory cannot be listed.

    """
    if not directory.is_dir():
        msg = f"Component directory {directory} does not exist"
        raise BuildIOError(msg)
    try:
        return _inspect(directory)
    except OSError as exc:
        msg = f"Failed to inspect component tree {directory}: {exc}"
        raise BuildIOError(msg) from exc


def _inspect(path: Path) -> TreeNode:
    if not path.is_dir():
        return TreeNode(name=path.name, type="file")
    children = tuple(_inspect(child) for child in sorted(path.iterdir(), key=lambda p: p.name))
    return TreeNode(name=path.name, type="dir", children=children)


def build_route_table(root: TreeNode) -> RouteTable:
    """Walk the components tree depth-first and collect route entries.

    *root* is the components directory itself; its own name is not part
    of any route path.

    """
    table = RouteTable()
    _collect(root.children, PurePosixPath(), table)
    return table


def _collect(nodes: tuple[TreeNode, ...], prefix: PurePosixPath, table: RouteTable) -> None:
    for node in nodes:
        if node.type == "dir":
            _collect(node.children, prefix / node.name, table)
            continue

        suffix = PurePosixPath(node.name).suffix
        if suffix not in SCRIPT_SUFFIXES:
            continue

        unique_path = str(prefix / node.name[: -len(suffix)])
        identifier = pascalize(unique_path)
        if not identifier:
            print(
                f"  Skipping component {unique_path!r}: no letters to derive a name from",
                file=sys.stderr,
            )
            continue
        table.add(identifier, unique_path)


def render_route_module(table: RouteTable, components_dir: str = "components") -> str:
    """Serialize *table* as an ES module exporting the route list."""
    entries = table.entries()
    imports = "\n".join(
        f"import {e.identifier} from './{components_dir}/{e.path}';" for e in entries
    )
    routes = "".join(
        f"    {{ path: '{e.location}', exact: true, component: {e.identifier} }},\n"
        for e in entries
    ).removesuffix(",\n")
    body = f"const routes = [\n{routes}\n];" if routes else "const routes = [];"
    sections = [s for s in (imports, body, "export default routes;") if s]
    return "\n\n".join(sections) + "\n"


def generate_routes(components_path: Path, module_path: Path) -> RouteTable:
    """Build the route table for *components_path* and write it to *module_path*.

    Identifier collisions are reported on stderr; the later component in
    traversal order wins.

    Raises:
        BuildIOError: If the tree cannot be read or the module cannot be written.

    """
    table = build_route_table(inspect_tree(components_path))

    for identifier, previous, current in table.collisions:
        print(
            f"  Route {identifier!r}: {current!r} replaces {previous!r}",
            file=sys.stderr,
        )

    source = render_route_module(table, components_path.name)
    try:
        # The module sits in the watched tree; leave identical text untouched.
        if module_path.is_file() and module_path.read_text(encoding="utf-8") == source:
            return table
        module_path.parent.mkdir(parents=True, exist_ok=True)
        module_path.write_text(source, encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to write route module {module_path}: {exc}"
        raise BuildIOError(msg) from exc

    return table
