"""Watch loop — single consumer from filesystem event to rebuild.

Flow per event:
    FileEvent -> ChangeDetector.observe -> classify -> incremental build

Events are handled one at a time in arrival order.  A rebuild runs to
completion (or fatal failure) before the next event is taken, so two
rebuilds never run external tools concurrently.  A failed rebuild is
reported and the loop keeps going; the next genuine edit retries.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from cessair._errors import CessairError
from cessair.pipeline.stages import classify
from cessair.watch.detector import ChangeDetector, Verdict

if TYPE_CHECKING:
    from cessair.config import CessairConfig
    from cessair.pipeline.orchestrator import BuildOrchestrator, BuildReport
    from cessair.watch.watcher import FileEvent, SourceWatcher


class WatchLoop:
    """Feeds watcher events through the detector into the orchestrator.

    Args:
        config: Frozen cessair configuration.
        orchestrator: Orchestrator that runs the rebuilds.
        detector: Change detector (a fresh, empty one when omitted).

    """

    def __init__(
        self,
        config: CessairConfig,
        orchestrator: BuildOrchestrator,
        detector: ChangeDetector | None = None,
    ) -> None:
        self._config = config
        self._orchestrator = orchestrator
        self._detector = detector if detector is not None else ChangeDetector()
        self._collector = orchestrator.collector

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    async def handle(self, event: FileEvent) -> BuildReport | None:
        """Process one event; return the rebuild report, or None if skipped.

        Raises:
            CessairError: If reading the file or any rebuild stage fails.

        """
        verdict = await self._detector.observe(event.kind, event.path)
        label = self._relative(event)

        if not verdict.triggers_build:
            match verdict:
                case Verdict.REMOVED:
                    self._collector.change_skipped(label, "removed")
                case Verdict.UNWATCHED:
                    self._collector.change_skipped(label, "unwatched")
                case _ if event.kind == "added":
                    self._collector.change_skipped(label, "already_tracked")
                case _:
                    self._collector.change_skipped(label, "unchanged")
            return None

        classification = classify(label, self._config.components_dir)
        if classification.ignored:
            self._collector.change_skipped(label, "no_stages")
            return None

        return await self._orchestrator.incremental_build(classification)

    async def consume(self, queue: asyncio.Queue[FileEvent | None]) -> None:
        """Handle events from *queue* until a ``None`` sentinel arrives."""
        while True:
            event = await queue.get()
            try:
                if event is None:
                    return
                try:
                    await self.handle(event)
                except CessairError as exc:
                    print(f"  Pipeline error ({event.path.name}): {exc}", file=sys.stderr)
            finally:
                queue.task_done()

    async def run(self, watcher: SourceWatcher) -> None:
        """Start *watcher* and consume its events until it stops."""
        producer = asyncio.create_task(watcher.run(), name="cessair-watcher")
        try:
            await self.consume(watcher.queue)
        finally:
            watcher.stop()
            if not producer.done():
                producer.cancel()
            await asyncio.gather(producer, return_exceptions=True)

    def _relative(self, event: FileEvent) -> str:
        try:
            return event.path.relative_to(self._config.sources_path).as_posix()
        except ValueError:
            return event.path.as_posix()
