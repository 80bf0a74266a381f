"""Build observability — typed status events and a bounded event log.

Quick Start:
    >>> from cessair.observability import BuildCollector, EventLog
    >>> collector = BuildCollector(EventLog(), verbose=False)
    >>> # The orchestrator records events via collector.stage_started(...)

"""

from cessair.observability.collector import BuildCollector
from cessair.observability.events import (
    BuildEvent,
    BuildFinished,
    ChangeSkipped,
    StageCompleted,
    StageFailed,
    StageStarted,
    WorkspaceMaterialized,
    now_ns,
)
from cessair.observability.log import EventLog

__all__ = [
    "BuildCollector",
    "BuildEvent",
    "BuildFinished",
    "ChangeSkipped",
    "EventLog",
    "StageCompleted",
    "StageFailed",
    "StageStarted",
    "WorkspaceMaterialized",
    "now_ns",
]
