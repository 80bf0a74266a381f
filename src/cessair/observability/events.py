"""Build event model.

Every status transition of the build pipeline is recorded as a frozen
dataclass with a monotonic nanosecond ``timestamp_ns``.  These replace a
shared, mutable status object: the orchestrator emits events, the
collector prints and stores them.

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# Stage events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StageStarted:
    """A pipeline stage began.

    Attributes:
        stage: Stage name (e.g. ``"SCRIPT_TRANSPILE"``).
        trigger: Source path that triggered the build, or ``""`` for a full build.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: str
    trigger: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class StageCompleted:
    """A pipeline stage finished successfully.

    Attributes:
        stage: Stage name.
        trigger: Source path that triggered the build, or ``""``.
        duration_ms: Wall-clock time of the stage in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: str
    trigger: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class StageFailed:
    """A pipeline stage raised a fatal error; the build was aborted.

    Attributes:
        stage: Stage name.
        trigger: Source path that triggered the build, or ``""``.
        error: Error message.
        exit_code: Exit code carried by the error.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: str
    trigger: str
    error: str
    exit_code: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WorkspaceMaterialized:
    """The output working copy was checked out."""

    output: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildFinished:
    """A full or incremental build ran every scheduled stage.

    Attributes:
        kind: ``"full"`` or ``"incremental"``.
        trigger: Source path for incremental builds, ``""`` for full builds.
        stages: Names of the stages that ran, in order.
        duration_ms: Total wall-clock time in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["full", "incremental"]
    trigger: str
    stages: tuple[str, ...]
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ChangeSkipped:
    """A watcher event did not trigger a build.

    Attributes:
        path: Path reported by the watcher.
        reason: Why no build was triggered.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    reason: Literal["already_tracked", "unchanged", "removed", "unwatched", "no_stages"]
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

BuildEvent: TypeAlias = (
    StageStarted
    | StageCompleted
    | StageFailed
    | WorkspaceMaterialized
    | BuildFinished
    | ChangeSkipped
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
