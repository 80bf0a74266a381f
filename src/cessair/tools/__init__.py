"""External tool adapters — subprocess execution and package-tool proxy."""

from cessair.tools.runner import CommandResult, CommandRunner, detect_package_tool

__all__ = ["CommandResult", "CommandRunner", "detect_package_tool"]
