"""Change detector — collapses content-identical filesystem events.

Editors and version-control operations fire filesystem events without
changing file contents.  The detector keeps an MD5 fingerprint of every
watched file it has seen and only lets an event through when the file is
new to it or its bytes actually changed:

    added    unseen path         -> fingerprint stored       NEW
    added    already tracked     -> nothing                  NOOP
    changed  same fingerprint    -> nothing                  NOOP
    changed  new fingerprint     -> fingerprint replaced     CHANGED
    removed  any                 -> fingerprint dropped      REMOVED
    added or changed, file gone  -> fingerprint dropped      REMOVED

watchfiles delivers each debounced batch as an unordered set, so a save
followed by a delete can arrive as "removed" then "changed".  A file that
no longer exists when it is read is therefore treated as removed.

The cache lives for the process only; a restart begins empty.
"""

from __future__ import annotations

import asyncio
import hashlib
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from cessair._errors import BuildIOError
from cessair.pipeline.stages import WATCHED_SUFFIXES

if TYPE_CHECKING:
    from cessair._types import ChangeKind, Fingerprint


class Verdict(Enum):
    """How the detector classified a watcher event."""

    NEW = "new"
    CHANGED = "changed"
    NOOP = "noop"
    REMOVED = "removed"
    UNWATCHED = "unwatched"

    @property
    def triggers_build(self) -> bool:
        return self in (Verdict.NEW, Verdict.CHANGED)


def fingerprint(data: bytes) -> Fingerprint:
    """Return the hex MD5 digest of *data*."""
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


class ChangeDetector:
    """Maintains the fingerprint cache and classifies watcher events.

    Only touched from the single event-processing task, so no locking.

    Args:
        suffixes: File suffixes the detector tracks; others are UNWATCHED.

    """

    def __init__(self, suffixes: frozenset[str] = WATCHED_SUFFIXES) -> None:
        self._suffixes = suffixes
        self._cache: dict[Path, Fingerprint] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, path: Path) -> Fingerprint | None:
        """Return the cached fingerprint for *path*, if any."""
        return self._cache.get(path)

    def is_watched(self, path: Path) -> bool:
        return path.suffix in self._suffixes

    async def observe(self, kind: ChangeKind, path: Path) -> Verdict:
        """Classify one watcher event and update the cache.

        Raises:
            BuildIOError: If an added or changed file exists but cannot be read.

        """
        if not self.is_watched(path):
            return Verdict.UNWATCHED

        if kind == "removed":
            self._cache.pop(path, None)
            return Verdict.REMOVED

        if kind == "added" and path in self._cache:
            # Duplicate notification for a file already tracked.
            return Verdict.NOOP

        try:
            data = await _read_bytes(path)
        except FileNotFoundError:
            self._cache.pop(path, None)
            return Verdict.REMOVED

        digest = fingerprint(data)
        previous = self._cache.get(path)
        if previous == digest:
            return Verdict.NOOP

        self._cache[path] = digest
        return Verdict.NEW if kind == "added" else Verdict.CHANGED


async def _read_bytes(path: Path) -> bytes:
    try:
        return await asyncio.to_thread(path.read_bytes)
    except FileNotFoundError:
        raise
    except OSError as exc:
        msg = f"Failed to read {path}: {exc}"
        raise BuildIOError(msg) from exc
