# src/kvharness/harness/session.py
"""Per-test session joining the record/playback harness with a client factory.

One KeyVaultTestSession is built per test (by a pytest fixture) and closed
at the end of it. Nothing is shared between tests.

Example:
    session = KeyVaultTestSession(load_settings(), KeyClientFactory())
    client = session.get_client_for_test("test_get_single_key")
    name = session.context.unique_name()
    client.create_ec_key(name)
    session.close()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from kvharness.core.logging import bind_test_context, clear_test_context, get_logger
from kvharness.harness.context import TestContext
from kvharness.harness.credentials import build_credential
from kvharness.harness.transport import TransportBinding, select_transport
from kvharness.recording.interceptor import RecordPlaybackInterceptor
from kvharness.recording.store import RecordingStore

if TYPE_CHECKING:
    from kvharness.core.config import HarnessSettings
    from kvharness.harness.factories import ClientFactory

logger = get_logger(__name__)

ClientT = TypeVar("ClientT")


class KeyVaultTestSession(Generic[ClientT]):
    """Client handle, credential and recording context for one test.

    The client is built lazily on the first get_client_for_test() call:
    transport selection (and the throttling cooldown) happens then, once.
    """

    def __init__(
        self,
        settings: HarnessSettings,
        factory: ClientFactory[ClientT],
        *,
        store: RecordingStore | None = None,
    ) -> None:
        """Initialize session.

        Args:
            settings: Resolved harness settings
            factory: Builds the service client
            store: Recording store (defaults to settings.recordings_path)
        """
        self._settings = settings
        self._factory = factory
        self._interceptor = RecordPlaybackInterceptor(store or RecordingStore(settings.recordings_path), settings.mode)
        self._context = TestContext(settings.mode, self._interceptor)
        self._binding: TransportBinding | None = None
        self._credential: Any = None
        self._client: ClientT | None = None
        self._hsm_client: ClientT | None = None

    @property
    def settings(self) -> HarnessSettings:
        return self._settings

    @property
    def context(self) -> TestContext:
        return self._context

    @property
    def interceptor(self) -> RecordPlaybackInterceptor:
        return self._interceptor

    @property
    def binding(self) -> TransportBinding:
        if self._binding is None:
            self._binding = select_transport(self._settings.mode, self._interceptor, self._settings)
        return self._binding

    @property
    def default_wait(self) -> float:
        """Polling interval for long-running operations in this mode (seconds)."""
        return self.binding.default_wait

    @property
    def purge_wait(self) -> float:
        """Purge propagation sleep for this mode (seconds)."""
        return self.binding.purge_wait

    def _get_credential(self) -> Any:
        if self._credential is None:
            self._credential = build_credential(self.binding.credential_kind, self._settings)
        return self._credential

    def initialize_client(self) -> ClientT:
        """Build the service client for this session's binding."""
        binding = self.binding
        client = self._factory.create(binding.vault_url, self._get_credential(), **binding.client_kwargs())
        logger.debug("client_initialized", mode=binding.mode.value, vault_url=binding.vault_url)
        self._client = client
        return client

    def get_client_for_test(self, test_name: str) -> ClientT:
        """Return the session's client with recording keyed to test_name."""
        client = self._client if self._client is not None else self.initialize_client()
        self._context.rename_test(test_name)
        bind_test_context(test_name, self._settings.mode.value)
        return client

    def get_hsm_client_for_test(self, test_name: str) -> ClientT:
        """Same as get_client_for_test, bound to the managed HSM.

        Raises:
            HarnessConfigurationError: If AZURE_KEYVAULT_HSM_URL is not configured
        """
        if self._hsm_client is None:
            binding = self.binding
            self._hsm_client = self._factory.create(binding.require_hsm_url(), self._get_credential(), **binding.client_kwargs())
        self._context.rename_test(test_name)
        bind_test_context(test_name, self._settings.mode.value)
        return self._hsm_client

    def has_recording(self, test_name: str) -> bool:
        return self._interceptor.store.exists(test_name)

    def close(self) -> None:
        """Flush the recording and release clients and credential."""
        self._interceptor.flush()
        for client in (self._client, self._hsm_client):
            if client is not None:
                client.close()  # type: ignore[attr-defined]
        if self._credential is not None:
            self._credential.close()
        self._client = None
        self._hsm_client = None
        self._credential = None
        clear_test_context()
