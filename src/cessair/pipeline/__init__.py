"""Pipeline layer — stage classification and ordered execution.

Decides which stages a change requires and runs them strictly in order,
delegating the work of each stage to external tools.
"""

from cessair.pipeline.orchestrator import BuildOrchestrator, BuildReport, BuildState
from cessair.pipeline.stages import (
    FULL_BUILD,
    Classification,
    FileCategory,
    Stage,
    classify,
)

__all__ = [
    "FULL_BUILD",
    "BuildOrchestrator",
    "BuildReport",
    "BuildState",
    "Classification",
    "FileCategory",
    "Stage",
    "classify",
]
