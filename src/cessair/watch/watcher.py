"""Source watcher — filesystem events as a bounded queue of typed events.

Monitors the sources directory with watchfiles and pushes one
:class:`FileEvent` per change onto an ``asyncio.Queue``.  Only page
templates, stylesheets and scripts are reported; any path with a hidden
(dot-prefixed) segment below the sources directory is dropped before it
reaches the queue.

The queue is bounded: when the consumer is busy with a rebuild the
producer waits, so events are never dropped and keep arrival order.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

from cessair.pipeline.stages import WATCHED_SUFFIXES

if TYPE_CHECKING:
    from cessair._types import ChangeKind
    from cessair.config import CessairConfig


@dataclass(frozen=True, slots=True)
class FileEvent:
    """A file change reported by the watcher.

    Attributes:
        kind: ``"added"``, ``"changed"`` or ``"removed"``.
        path: Absolute path to the file.

    """

    kind: ChangeKind
    path: Path


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "added",
    Change.modified: "changed",
    Change.deleted: "removed",
}


def is_watched_path(path: Path, root: Path) -> bool:
    """Return True if *path* is a watched, non-hidden file under *root*."""
    try:
        rel = path.relative_to(root)
    except ValueError:
        return False
    if not rel.parts or any(part.startswith(".") for part in rel.parts):
        return False
    return rel.suffix in WATCHED_SUFFIXES


class SourceWatcher:
    """Watches the sources directory and queues :class:`FileEvent` objects.

    Call :meth:`run` as a task; consume from :attr:`queue`.  Setting the
    stop event ends :meth:`run` after the current batch.

    """

    def __init__(self, config: CessairConfig) -> None:
        self._config = config
        self._queue: asyncio.Queue[FileEvent | None] = asyncio.Queue(maxsize=config.queue_size)
        self._stop_event = asyncio.Event()

    @property
    def queue(self) -> asyncio.Queue[FileEvent | None]:
        return self._queue

    def stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        """Watch until stopped, then enqueue ``None`` to end consumers."""
        root = self._config.sources_path

        def watch_filter(change: Change, path: str) -> bool:
            return is_watched_path(Path(path), root)

        try:
            async for raw_changes in awatch(
                root,
                watch_filter=watch_filter,
                debounce=self._config.debounce_ms,
                stop_event=self._stop_event,
            ):
                for event in to_events(raw_changes):
                    await self._queue.put(event)
        finally:
            # A full queue means the consumer is gone already.
            with contextlib.suppress(asyncio.QueueFull):
                self._queue.put_nowait(None)


def to_events(raw_changes: set[tuple[Change, str]]) -> list[FileEvent]:
    """Convert one watchfiles batch into events, ordered by path then kind."""
    events = [
        FileEvent(kind=_CHANGE_KIND_MAP[change], path=Path(path_str))
        for change, path_str in raw_changes
        if change in _CHANGE_KIND_MAP
    ]
    events.sort(key=lambda e: (str(e.path), _KIND_ORDER[e.kind]))
    return events


# Within one batch a file can be removed and re-added; keep that sequence.
_KIND_ORDER: dict[str, int] = {"removed": 0, "added": 1, "changed": 2}
