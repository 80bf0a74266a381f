"""Watch layer — filesystem events to incremental rebuilds.

Handles file watching, fingerprint-based change detection and the
sequential event loop that drives the pipeline.
"""

from cessair.watch.detector import ChangeDetector, Verdict, fingerprint
from cessair.watch.loop import WatchLoop
from cessair.watch.watcher import FileEvent, SourceWatcher

__all__ = [
    "ChangeDetector",
    "FileEvent",
    "SourceWatcher",
    "Verdict",
    "WatchLoop",
    "fingerprint",
]
