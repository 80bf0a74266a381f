"""Routing layer — page components as a generated route module.

Walks the components tree, derives a stable identifier per component and
serializes the resulting route table as the module the script registry
imports.
"""

from cessair.routing.table import (
    RouteEntry,
    RouteTable,
    TreeNode,
    build_route_table,
    generate_routes,
    inspect_tree,
    pascalize,
    render_route_module,
)

__all__ = [
    "RouteEntry",
    "RouteTable",
    "TreeNode",
    "build_route_table",
    "generate_routes",
    "inspect_tree",
    "pascalize",
    "render_route_module",
]
