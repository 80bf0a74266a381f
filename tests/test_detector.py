"""Tests for cessair.watch.detector — fingerprint-based change detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from cessair._errors import BuildIOError
from cessair.watch.detector import ChangeDetector, Verdict, fingerprint


@pytest.fixture
def detector() -> ChangeDetector:
    return ChangeDetector()


class TestFingerprint:
    def test_deterministic(self) -> None:
        assert fingerprint(b"abc") == fingerprint(b"abc")

    def test_md5_hex(self) -> None:
        assert fingerprint(b"") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_differs_on_content(self) -> None:
        assert fingerprint(b"a") != fingerprint(b"b")


class TestChangeDetector:
    """Event classification and cache lifecycle."""

    @pytest.mark.asyncio
    async def test_add_new_path_stores_fingerprint(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        path = tmp_path / "sources" / "components" / "About.jsx"
        path.parent.mkdir(parents=True)
        path.write_text("export default 1;\n")

        verdict = await detector.observe("added", path)

        assert verdict is Verdict.NEW
        assert verdict.triggers_build
        assert detector.get(path) == fingerprint(b"export default 1;\n")

    @pytest.mark.asyncio
    async def test_duplicate_add_is_noop(self, detector: ChangeDetector, tmp_path: Path) -> None:
        path = tmp_path / "app.scss"
        path.write_text("a {}\n")
        await detector.observe("added", path)
        path.write_text("b {}\n")

        verdict = await detector.observe("added", path)

        assert verdict is Verdict.NOOP
        assert detector.get(path) == fingerprint(b"a {}\n")

    @pytest.mark.asyncio
    async def test_change_with_same_content_is_noop(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        path = tmp_path / "app.scss"
        path.write_text("body {}\n")
        await detector.observe("added", path)
        before = detector.get(path)

        path.write_text("body {}\n")
        verdict = await detector.observe("changed", path)

        assert verdict is Verdict.NOOP
        assert not verdict.triggers_build
        assert detector.get(path) == before

    @pytest.mark.asyncio
    async def test_change_with_new_content_updates_cache(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        path = tmp_path / "app.scss"
        path.write_text("body {}\n")
        await detector.observe("added", path)

        path.write_text("body { margin: 0; }\n")
        verdict = await detector.observe("changed", path)

        assert verdict is Verdict.CHANGED
        assert detector.get(path) == fingerprint(b"body { margin: 0; }\n")

    @pytest.mark.asyncio
    async def test_change_of_untracked_file_triggers(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        path = tmp_path / "application.js"
        path.write_text("1;\n")
        assert await detector.observe("changed", path) is Verdict.CHANGED
        assert path in detector

    @pytest.mark.asyncio
    async def test_unlink_removes_and_readd_is_new(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        path = tmp_path / "Home.jsx"
        path.write_text("x\n")
        await detector.observe("added", path)

        assert await detector.observe("removed", path) is Verdict.REMOVED
        assert path not in detector

        assert await detector.observe("added", path) is Verdict.NEW

    @pytest.mark.asyncio
    async def test_unlink_of_unknown_path(self, detector: ChangeDetector, tmp_path: Path) -> None:
        verdict = await detector.observe("removed", tmp_path / "ghost.js")
        assert verdict is Verdict.REMOVED
        assert not verdict.triggers_build

    @pytest.mark.asyncio
    async def test_unwatched_suffix(self, detector: ChangeDetector, tmp_path: Path) -> None:
        path = tmp_path / "notes.md"
        path.write_text("hi\n")
        assert await detector.observe("added", path) is Verdict.UNWATCHED
        assert len(detector) == 0

    @pytest.mark.asyncio
    async def test_vanished_file_counts_as_removal(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        path = tmp_path / "app.scss"
        path.write_text("a { }\n")
        await detector.observe("added", path)
        path.unlink()

        verdict = await detector.observe("changed", path)

        assert verdict is Verdict.REMOVED
        assert path not in detector

    @pytest.mark.asyncio
    async def test_save_then_delete_in_one_batch(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        # Batches are unordered sets; the delete may be handled first.
        path = tmp_path / "app.scss"
        path.write_text("a { }\n")
        await detector.observe("added", path)
        path.write_text("a { color: red; }\n")
        path.unlink()

        verdicts = [
            await detector.observe("removed", path),
            await detector.observe("changed", path),
        ]

        assert verdicts == [Verdict.REMOVED, Verdict.REMOVED]
        assert not any(v.triggers_build for v in verdicts)
        assert len(detector) == 0

    @pytest.mark.asyncio
    async def test_added_file_gone_before_read(
        self, detector: ChangeDetector, tmp_path: Path
    ) -> None:
        assert await detector.observe("added", tmp_path / "Temp.jsx") is Verdict.REMOVED

    @pytest.mark.asyncio
    async def test_unreadable_file_raises(self, detector: ChangeDetector, tmp_path: Path) -> None:
        directory = tmp_path / "vendor.js"
        directory.mkdir()
        with pytest.raises(BuildIOError, match="Failed to read"):
            await detector.observe("changed", directory)
