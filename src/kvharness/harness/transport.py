# src/kvharness/harness/transport.py
"""Transport selection: which HTTP path a service client uses per test mode.

    PLAYBACK  canned transport replaying the recording, fake credential,
              placeholder vault URL, 1 ms wait quantum
    RECORD    real transport + record policy, service principal, 20 s quantum
    LIVE      real transport, service principal, 20 s quantum

When running against a real vault, Key Vault answers HTTP 429 if tests fire
requests back to back. Setting AZURE_KEYVAULT_AVOID_THROTTLED makes
select_transport sleep a fixed 10 s first. This is a fixed delay, not
adaptive backoff.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kvharness.contracts.enums import CredentialKind, TestMode
from kvharness.contracts.errors import HarnessConfigurationError
from kvharness.core.logging import get_logger
from kvharness.core.redaction import REDACTED_HSM_URL, REDACTED_VAULT_URL

if TYPE_CHECKING:
    from azure.core.pipeline.transport import HttpTransport

    from kvharness.core.config import HarnessSettings
    from kvharness.recording.interceptor import RecordPlaybackInterceptor

logger = get_logger(__name__)

# Seconds. Playback completes immediately; the 1 ms quantum only keeps
# poll loops from spinning.
PLAYBACK_WAIT_SECONDS = 0.001
LIVE_WAIT_SECONDS = 20.0
PURGE_PROPAGATION_SECONDS = 60.0
THROTTLE_COOLDOWN_SECONDS = 10.0


@dataclass(frozen=True)
class TransportBinding:
    """Everything a client factory needs to build a client for one mode.

    Attributes:
        mode: Test mode this binding was selected for
        credential_kind: Credential the client must authenticate with
        vault_url: Vault URL the client must target
        hsm_url: Managed HSM URL, if one is configured
        default_wait: Polling interval for long-running operations (seconds)
        purge_wait: Sleep after purging so deletions propagate (seconds)
        transport: Replacement transport (playback only)
        per_retry_policies: Extra pipeline policies (record only)
    """

    mode: TestMode
    credential_kind: CredentialKind
    vault_url: str
    hsm_url: str | None
    default_wait: float
    purge_wait: float
    transport: HttpTransport | None = None
    per_retry_policies: tuple[Any, ...] = ()

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments to pass to an Azure SDK client constructor."""
        kwargs: dict[str, Any] = {}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        if self.per_retry_policies:
            kwargs["per_retry_policies"] = list(self.per_retry_policies)
        return kwargs

    def require_hsm_url(self) -> str:
        """HSM URL, failing loudly when the run has none configured."""
        if self.hsm_url is None:
            raise HarnessConfigurationError("AZURE_KEYVAULT_HSM_URL")
        return self.hsm_url


def select_transport(
    mode: TestMode,
    interceptor: RecordPlaybackInterceptor,
    settings: HarnessSettings,
) -> TransportBinding:
    """Bind a test mode to its transport, credential and timing.

    Calling twice with the same interceptor returns equal bindings.

    Args:
        mode: Resolved test mode
        interceptor: Supplies the playback transport and record policy
        settings: Vault URLs and the throttling flag

    Returns:
        TransportBinding for the mode
    """
    if mode is TestMode.PLAYBACK:
        binding = TransportBinding(
            mode=mode,
            credential_kind=CredentialKind.FAKE,
            vault_url=REDACTED_VAULT_URL,
            hsm_url=REDACTED_HSM_URL,
            default_wait=PLAYBACK_WAIT_SECONDS,
            purge_wait=0.0,
            transport=interceptor.get_playback_client(),
        )
    elif mode is TestMode.RECORD:
        binding = TransportBinding(
            mode=mode,
            credential_kind=CredentialKind.CLIENT_SECRET,
            vault_url=settings.vault_url,
            hsm_url=settings.hsm_url,
            default_wait=LIVE_WAIT_SECONDS,
            purge_wait=PURGE_PROPAGATION_SECONDS,
            per_retry_policies=(interceptor.get_record_policy(),),
        )
    else:
        binding = TransportBinding(
            mode=mode,
            credential_kind=CredentialKind.CLIENT_SECRET,
            vault_url=settings.vault_url,
            hsm_url=settings.hsm_url,
            default_wait=LIVE_WAIT_SECONDS,
            purge_wait=PURGE_PROPAGATION_SECONDS,
        )

    if mode is not TestMode.PLAYBACK and settings.avoid_throttled:
        logger.info("Wait to avoid server throttled", seconds=THROTTLE_COOLDOWN_SECONDS)
        time.sleep(THROTTLE_COOLDOWN_SECONDS)

    return binding
