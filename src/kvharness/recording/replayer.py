# src/kvharness/recording/replayer.py
"""Interaction replayer for playback mode - returns recorded responses.

In playback, instead of sending requests to Key Vault, the playback
transport asks the InteractionReplayer for the next recorded interaction.
This enables:

- Deterministic re-execution of SDK tests with no network access
- Running the suite in CI without vault credentials
- Catching tests that diverge from what was recorded

Interactions are consumed strictly in recorded order. Each request's
signature (method + path) must equal the signature of the next recorded
interaction; anything else is a ReplayMissError. Order matters because Key
Vault is stateful: the same GET /deletedkeys/k1 answers 404 before a delete
completes and 200 after.
"""

from __future__ import annotations

import threading

from kvharness.contracts.errors import ReplayMissError
from kvharness.contracts.recording import Interaction, Recording
from kvharness.core.logging import get_logger
from kvharness.core.redaction import request_signature

logger = get_logger(__name__)


class InteractionReplayer:
    """Replays one test's recorded interactions in order.

    Example:
        replayer = InteractionReplayer(store.load("test_get_single_key"))
        interaction = replayer.replay("GET", "https://REDACTED.vault.azure.net/keys/k1?api-version=7.5")
        interaction.response.content()

    Thread Safety:
        SDK pollers issue their status requests from a background thread,
        so the cursor is guarded by a lock. Requests are still expected to
        arrive one at a time, in recorded order.
    """

    def __init__(self, recording: Recording) -> None:
        self._recording = recording
        self._position = 0
        self._lock = threading.Lock()

    @property
    def test_name(self) -> str:
        return self._recording.test_name

    @property
    def position(self) -> int:
        """Number of interactions consumed so far."""
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._recording.interactions) - self._position

    def replay(self, method: str, url: str) -> Interaction:
        """Return the next recorded interaction for this request.

        Args:
            method: HTTP method of the outgoing request
            url: Full request URL (redacted before matching)

        Returns:
            The matching recorded Interaction

        Raises:
            ReplayMissError: If the recording is exhausted or the next
                recorded signature differs from this request's
        """
        signature = request_signature(method, url)

        with self._lock:
            position = self._position
            interactions = self._recording.interactions

            if position >= len(interactions):
                logger.warning("replay_exhausted", test_name=self.test_name, signature=signature)
                raise ReplayMissError(self.test_name, signature, None, position)

            interaction = interactions[position]
            if interaction.signature != signature:
                logger.warning(
                    "replay_mismatch",
                    test_name=self.test_name,
                    signature=signature,
                    expected=interaction.signature,
                    position=position,
                )
                raise ReplayMissError(self.test_name, signature, interaction.signature, position)

            self._position = position + 1
            return interaction

    def reset(self) -> None:
        """Rewind to the first interaction.

        Replaying the same recording again yields byte-identical responses.
        """
        with self._lock:
            self._position = 0
