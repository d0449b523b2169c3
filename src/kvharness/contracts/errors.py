"""Exceptions raised by the harness.

Service failures are NOT wrapped here: the SDK's HttpResponseError reaches
the calling test unchanged so it fails there.
"""

from __future__ import annotations

from typing import Any


class HarnessConfigurationError(RuntimeError):
    """Raised when required environment configuration is missing or invalid.

    Never retried. The message always names the offending variable.

    Attributes:
        variable: Name of the environment variable at fault
    """

    def __init__(self, variable: str, message: str | None = None) -> None:
        self.variable = variable
        super().__init__(message or f"{variable} is required to run the tests but not set as an environment variable.")


class OperationFailedError(Exception):
    """Raised when a long-running operation reaches a terminal failure status.

    Attributes:
        status: Final status reported by the poller (lower-cased)
        result: Whatever the poller returned as its result, if retrievable
    """

    def __init__(self, status: str, result: Any = None) -> None:
        self.status = status
        self.result = result
        super().__init__(f"Long-running operation ended with status '{status}'")


class RecordingNotFoundError(FileNotFoundError):
    """Raised in playback when no recording exists for the named test.

    Attributes:
        test_name: Test whose recording was requested
        path: Where the recording was expected
    """

    def __init__(self, test_name: str, path: str) -> None:
        self.test_name = test_name
        self.path = path
        super().__init__(f"No recording for test '{test_name}' at {path}. Run with AZURE_TEST_MODE=record to create it.")


class RecordingIntegrityError(ValueError):
    """Raised when a stored interaction's request_hash does not match its signature.

    Indicates a hand-edited or corrupted recording file.
    """

    def __init__(self, test_name: str, index: int, expected: str, actual: str) -> None:
        self.test_name = test_name
        self.index = index
        super().__init__(f"Recording '{test_name}' interaction {index}: request_hash {actual} does not match signature hash {expected}")


class ReplayMissError(Exception):
    """Raised when playback cannot answer a request from the recording.

    Either the recording is exhausted, or the next recorded interaction has a
    different signature - the test has diverged from the recorded run.

    Attributes:
        test_name: Test being replayed
        signature: Signature of the request that could not be answered
        expected: Signature of the next recorded interaction (None if exhausted)
        position: Index into the recorded interactions
    """

    def __init__(self, test_name: str, signature: str, expected: str | None, position: int) -> None:
        self.test_name = test_name
        self.signature = signature
        self.expected = expected
        self.position = position
        if expected is None:
            detail = f"recording has only {position} interaction(s)"
        else:
            detail = f"expected '{expected}' at position {position}"
        super().__init__(f"Playback miss for '{test_name}': got '{signature}', {detail}")
