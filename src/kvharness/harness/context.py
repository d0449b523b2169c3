"""Per-test identity: which test is running and which names it generated."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from kvharness.contracts.enums import TestMode

if TYPE_CHECKING:
    from kvharness.recording.interceptor import RecordPlaybackInterceptor


class TestContext:
    """Tracks the current test for record/playback keying.

    rename_test() must run before the first request of each test case so
    the interceptor writes to, or replays from, that test's recording.
    """

    __test__ = False  # not a pytest test class despite the name

    def __init__(self, mode: TestMode, interceptor: RecordPlaybackInterceptor) -> None:
        self._mode = mode
        self._interceptor = interceptor

    @property
    def mode(self) -> TestMode:
        return self._mode

    @property
    def test_name(self) -> str:
        return self._interceptor.test_name

    def is_playback_mode(self) -> bool:
        return self._mode is TestMode.PLAYBACK

    def is_live_mode(self) -> bool:
        return self._mode is TestMode.LIVE

    def rename_test(self, test_name: str) -> None:
        self._interceptor.rename_test(test_name)

    def unique_name(self) -> str:
        """A fresh object name for Key Vault (UUID form).

        Record mode stores each generated name in the recording; playback
        hands the stored names back in the same order, so request paths
        match what was recorded.
        """
        if self._mode is TestMode.PLAYBACK:
            return self._interceptor.next_variable()
        name = str(uuid.uuid4())
        if self._mode is TestMode.RECORD:
            self._interceptor.record_variable(name)
        return name
