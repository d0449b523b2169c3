# src/kvharness/recording/store.py
"""Per-test recording files on disk.

One JSON file per test under <recording_dir>/recordings/. Files are written
atomically (temp file + rename) because the record policy rewrites the file
after every completed interaction, and a test killed mid-write must not
leave a truncated recording behind.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path

from kvharness.contracts.errors import RecordingIntegrityError, RecordingNotFoundError
from kvharness.contracts.recording import Recording
from kvharness.core.canonical import stable_hash
from kvharness.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_NAME_HASH_LENGTH = 8


def signature_hash(signature: str) -> str:
    """Stable hash stored with every interaction for integrity checking."""
    return stable_hash({"signature": signature})


class RecordingStore:
    """Reads and writes recordings keyed by test name.

    Example:
        store = RecordingStore(settings.recordings_path)
        if store.exists("test_get_single_key"):
            recording = store.load("test_get_single_key")
    """

    def __init__(self, root: Path) -> None:
        """Initialize store.

        Args:
            root: Directory holding recording files (created on first save)
        """
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, test_name: str) -> Path:
        """File path for a test's recording.

        Parametrized pytest ids contain brackets and slashes; those collapse
        to underscores so every test maps to a flat, portable filename. A
        collapsed name gets a short hash of the original appended, so ids
        such as t[a/b] and t[a_b] keep separate files.
        """
        safe = _UNSAFE_FILENAME_CHARS.sub("_", test_name).strip("_")
        if not safe:
            raise ValueError(f"Cannot derive a recording filename from test name {test_name!r}")
        if safe != test_name:
            digest = stable_hash({"test_name": test_name})[:_NAME_HASH_LENGTH]
            safe = f"{safe}.{digest}"
        return self._root / f"{safe}.json"

    def exists(self, test_name: str) -> bool:
        return self.path_for(test_name).is_file()

    def load(self, test_name: str) -> Recording:
        """Load and integrity-check a recording.

        Raises:
            RecordingNotFoundError: If no file exists for the test
            RecordingIntegrityError: If a stored request_hash does not match its signature
        """
        path = self.path_for(test_name)
        if not path.is_file():
            raise RecordingNotFoundError(test_name, str(path))

        with path.open(encoding="utf-8") as f:
            recording = Recording.from_dict(json.load(f))

        for index, interaction in enumerate(recording.interactions):
            expected = signature_hash(interaction.signature)
            if interaction.request_hash != expected:
                raise RecordingIntegrityError(test_name, index, expected, interaction.request_hash)

        return recording

    def save(self, recording: Recording) -> Path:
        """Write a recording atomically, replacing any previous one."""
        path = self.path_for(recording.test_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(recording.to_dict(), f, indent=2)
                f.write("\n")
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(
            "recording_saved",
            test_name=recording.test_name,
            interactions=len(recording.interactions),
            path=str(path),
        )
        return path

    def delete(self, test_name: str) -> bool:
        """Delete a test's recording.

        Returns:
            True if a file was removed, False if there was none
        """
        path = self.path_for(test_name)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def list_names(self) -> list[str]:
        """Test names of all stored recordings, sorted.

        Files that are not readable recordings are skipped with a warning.
        """
        if not self._root.is_dir():
            return []
        names: list[str] = []
        for path in sorted(self._root.glob("*.json")):
            try:
                with path.open(encoding="utf-8") as f:
                    test_name = json.load(f)["test_name"]
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning("recording_unreadable", path=str(path), error=str(e))
                continue
            if not isinstance(test_name, str):
                logger.warning("recording_unreadable", path=str(path), error="test_name is not a string")
                continue
            names.append(test_name)
        return sorted(names)
