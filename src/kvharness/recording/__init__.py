"""Recording and playback of Key Vault HTTP interactions.

Example:
    from kvharness.recording import RecordingStore, RecordPlaybackInterceptor

    interceptor = RecordPlaybackInterceptor(RecordingStore(path), TestMode.RECORD)
    interceptor.rename_test("test_create_key")
    client = KeyClient(url, credential, per_retry_policies=[interceptor.get_record_policy()])
"""

from kvharness.recording.interceptor import (
    PlaybackAdapter,
    RecordPlaybackInterceptor,
    RecordPolicy,
    build_interaction,
)
from kvharness.recording.replayer import InteractionReplayer
from kvharness.recording.store import RecordingStore, signature_hash

__all__ = [
    "InteractionReplayer",
    "PlaybackAdapter",
    "RecordPlaybackInterceptor",
    "RecordPolicy",
    "RecordingStore",
    "build_interaction",
    "signature_hash",
]
