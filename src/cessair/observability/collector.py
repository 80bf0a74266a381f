"""Build collector — records pipeline events and prints status lines.

The orchestrator and watch loop report every status transition through a
:class:`BuildCollector`.  Each call appends a frozen event to the
:class:`EventLog` and, when verbose, prints one line to stderr.

Thread Safety:
    The collector delegates storage to ``EventLog`` which is internally
    locked.  Printing assumes the single event-processing task.

"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Literal, TextIO

from cessair.banner import format_status
from cessair.observability.events import (
    BuildFinished,
    ChangeSkipped,
    StageCompleted,
    StageFailed,
    StageStarted,
    WorkspaceMaterialized,
    now_ns,
)
from cessair.observability.log import EventLog

if TYPE_CHECKING:
    from cessair.pipeline.stages import Stage


class BuildCollector:
    """Unified status sink for builds.

    Args:
        log: The EventLog to store events in (a fresh one when omitted).
        verbose: Print a status line per event.
        stream: Output stream for status lines (defaults to ``sys.stderr``).

    """

    __slots__ = ("_log", "_stream", "_verbose")

    def __init__(
        self,
        log: EventLog | None = None,
        *,
        verbose: bool = True,
        stream: TextIO | None = None,
    ) -> None:
        self._log = log if log is not None else EventLog()
        self._verbose = verbose
        self._stream = stream

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Stage events -----

    def stage_started(self, stage: Stage, trigger: str = "") -> None:
        self._log.append(StageStarted(stage=stage.name, trigger=trigger, timestamp_ns=now_ns()))
        self._emit("start", stage.label, trigger)

    def stage_completed(self, stage: Stage, trigger: str = "", *, duration_ms: float) -> None:
        self._log.append(
            StageCompleted(
                stage=stage.name,
                trigger=trigger,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
        self._emit("ok", stage.label, f"{duration_ms:.0f}ms")

    def stage_failed(self, stage: Stage, error: BaseException, trigger: str = "") -> None:
        self._log.append(
            StageFailed(
                stage=stage.name,
                trigger=trigger,
                error=str(error),
                exit_code=getattr(error, "exit_code", 1),
                timestamp_ns=now_ns(),
            )
        )
        self._emit("fail", stage.label, str(error))

    # ----- Build events -----

    def workspace_materialized(self, output: str) -> None:
        self._log.append(WorkspaceMaterialized(output=output, timestamp_ns=now_ns()))
        self._emit("ok", "Make working copy", output)

    def build_finished(
        self,
        kind: Literal["full", "incremental"],
        stages: tuple[Stage, ...],
        *,
        trigger: str = "",
        duration_ms: float,
    ) -> None:
        self._log.append(
            BuildFinished(
                kind=kind,
                trigger=trigger,
                stages=tuple(s.name for s in stages),
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
        if kind == "full":
            self._emit("ok", "Succeed to build!", f"{duration_ms:.0f}ms")
        else:
            self._emit("ok", f"Rebuilt after '{trigger}'", f"{duration_ms:.0f}ms")

    def change_skipped(
        self,
        path: str,
        reason: Literal["already_tracked", "unchanged", "removed", "unwatched", "no_stages"],
    ) -> None:
        # Skips are routine; keep them out of the terminal.
        self._log.append(ChangeSkipped(path=path, reason=reason, timestamp_ns=now_ns()))

    def _emit(self, kind: str, message: str, detail: str = "") -> None:
        if not self._verbose:
            return
        out = self._stream if self._stream is not None else sys.stderr
        print(format_status(kind, message, detail), file=out)
