"""Shared type definitions for cessair."""

from typing import Literal, TypeAlias

# Mode of operation
BuildMode: TypeAlias = Literal["build", "watch"]

# Route identifier (PascalCase component name, e.g. "BlogPost")
RouteIdentifier: TypeAlias = str

# Extension-free posix path relative to the components directory (e.g. "blog/Post")
RoutePath: TypeAlias = str

# Page URL emitted into the route module (e.g. "/blog/Post.html")
RouteLocation: TypeAlias = str

# Hex digest of a file's bytes
Fingerprint: TypeAlias = str

# Filesystem change reported by the watcher
ChangeKind: TypeAlias = Literal["added", "changed", "removed"]
