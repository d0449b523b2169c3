# tests/harness/test_context.py
"""Tests for TestContext naming and mode queries."""

import uuid
from pathlib import Path

import pytest

from kvharness.contracts.enums import TestMode
from kvharness.harness.context import TestContext
from kvharness.recording.interceptor import RecordPlaybackInterceptor
from kvharness.recording.store import RecordingStore


def _context(tmp_path: Path, mode: TestMode) -> tuple[TestContext, RecordingStore]:
    store = RecordingStore(tmp_path / "recordings")
    return TestContext(mode, RecordPlaybackInterceptor(store, mode)), store


class TestModeQueries:
    @pytest.mark.parametrize(
        ("mode", "playback", "live"),
        [(TestMode.PLAYBACK, True, False), (TestMode.RECORD, False, False), (TestMode.LIVE, False, True)],
    )
    def test_flags(self, tmp_path: Path, mode: TestMode, playback: bool, live: bool) -> None:
        context, _ = _context(tmp_path, mode)

        assert context.mode is mode
        assert context.is_playback_mode() is playback
        assert context.is_live_mode() is live

    def test_rename_sets_test_name(self, tmp_path: Path) -> None:
        context, _ = _context(tmp_path, TestMode.LIVE)

        context.rename_test("test_get_single_key")

        assert context.test_name == "test_get_single_key"


class TestUniqueName:
    """unique_name is random live, recorded in record, replayed in playback."""

    def test_live_names_are_uuids(self, tmp_path: Path) -> None:
        context, _ = _context(tmp_path, TestMode.LIVE)
        context.rename_test("test_live")

        first, second = context.unique_name(), context.unique_name()

        assert first != second
        assert uuid.UUID(first)

    def test_record_then_playback_returns_same_names(self, tmp_path: Path) -> None:
        recorder, _ = _context(tmp_path, TestMode.RECORD)
        recorder.rename_test("test_names")
        recorded = [recorder.unique_name() for _ in range(3)]

        player, _ = _context(tmp_path, TestMode.PLAYBACK)
        player.rename_test("test_names")
        replayed = [player.unique_name() for _ in range(3)]

        assert replayed == recorded

    def test_playback_restarts_after_rename(self, tmp_path: Path) -> None:
        recorder, _ = _context(tmp_path, TestMode.RECORD)
        recorder.rename_test("test_names")
        name = recorder.unique_name()

        player, _ = _context(tmp_path, TestMode.PLAYBACK)
        player.rename_test("test_names")
        assert player.unique_name() == name
        player.rename_test("test_names")
        assert player.unique_name() == name
