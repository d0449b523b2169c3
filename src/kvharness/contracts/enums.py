"""Modes, statuses and kinds shared across harness boundaries."""

from enum import StrEnum


class TestMode(StrEnum):
    """How a test run talks to Key Vault.

    Resolved once per test-suite run from AZURE_TEST_MODE.

    Values:
        LIVE: Real transport, real credentials, nothing recorded
        RECORD: Real transport plus a policy that writes every interaction
        PLAYBACK: Canned transport replaying a recording, no network I/O
    """

    __test__ = False  # not a pytest test class despite the name

    LIVE = "live"
    RECORD = "record"
    PLAYBACK = "playback"


class CredentialKind(StrEnum):
    """Which credential a transport binding hands to the service client."""

    CLIENT_SECRET = "client_secret"
    FAKE = "fake"


class VaultObjectKind(StrEnum):
    """Kind of object a cleanup sweep operates on."""

    KEYS = "keys"
    CERTIFICATES = "certificates"


# Poller status strings (lower-cased) that mean the operation succeeded.
# Key Vault delete/recover pollers report "finished", certificate creation
# "completed", azure-core LRO polling "succeeded".
TERMINAL_SUCCESS_STATUSES = frozenset({"finished", "completed", "succeeded"})

# Poller status strings (lower-cased) that mean the operation ended badly.
# Key Vault certificate operations report "failed"; azure-core pollers use
# both spellings of cancelled.
TERMINAL_FAILURE_STATUSES = frozenset({"failed", "cancelled", "canceled"})
