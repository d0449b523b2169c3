"""Shared contracts: enums, exceptions and recording types.

Leaf package with no dependencies on the rest of kvharness.
"""

from kvharness.contracts.enums import (
    TERMINAL_FAILURE_STATUSES,
    TERMINAL_SUCCESS_STATUSES,
    CredentialKind,
    TestMode,
    VaultObjectKind,
)
from kvharness.contracts.errors import (
    HarnessConfigurationError,
    OperationFailedError,
    RecordingIntegrityError,
    RecordingNotFoundError,
    ReplayMissError,
)
from kvharness.contracts.recording import (
    Interaction,
    RecordedRequest,
    RecordedResponse,
    Recording,
)

__all__ = [
    "TERMINAL_FAILURE_STATUSES",
    "TERMINAL_SUCCESS_STATUSES",
    "CredentialKind",
    "HarnessConfigurationError",
    "Interaction",
    "OperationFailedError",
    "RecordedRequest",
    "RecordedResponse",
    "Recording",
    "RecordingIntegrityError",
    "RecordingNotFoundError",
    "ReplayMissError",
    "TestMode",
    "VaultObjectKind",
]
