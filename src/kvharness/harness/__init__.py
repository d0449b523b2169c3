"""Test harness controller: transport selection, sessions, polling and cleanup."""

from kvharness.harness.cleanup import (
    clean_up_certificate_vault,
    clean_up_key_vault,
    remove_all_certificates_from_vault,
    remove_all_keys_from_vault,
)
from kvharness.harness.context import TestContext
from kvharness.harness.credentials import FakeTokenCredential, build_credential
from kvharness.harness.factories import CertificateClientFactory, ClientFactory, KeyClientFactory
from kvharness.harness.paging import PageCursor, drain_pages
from kvharness.harness.polling import OperationHandle, poll_until_done
from kvharness.harness.session import KeyVaultTestSession
from kvharness.harness.transport import (
    LIVE_WAIT_SECONDS,
    PLAYBACK_WAIT_SECONDS,
    PURGE_PROPAGATION_SECONDS,
    THROTTLE_COOLDOWN_SECONDS,
    TransportBinding,
    select_transport,
)

__all__ = [
    "LIVE_WAIT_SECONDS",
    "PLAYBACK_WAIT_SECONDS",
    "PURGE_PROPAGATION_SECONDS",
    "THROTTLE_COOLDOWN_SECONDS",
    "CertificateClientFactory",
    "ClientFactory",
    "FakeTokenCredential",
    "KeyClientFactory",
    "KeyVaultTestSession",
    "OperationHandle",
    "PageCursor",
    "TestContext",
    "TransportBinding",
    "build_credential",
    "clean_up_certificate_vault",
    "clean_up_key_vault",
    "drain_pages",
    "poll_until_done",
    "remove_all_certificates_from_vault",
    "remove_all_keys_from_vault",
    "select_transport",
]
