# src/kvharness/pytest_plugin.py
"""pytest fixtures wiring Key Vault tests to the record/playback harness.

Enable from a conftest.py:

    pytest_plugins = ["kvharness.pytest_plugin"]

Each test gets its own KeyVaultTestSession keyed by the test's node name,
so recordings are per test. In playback a test without a recording is
skipped instead of failing on its first request.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

import pytest

from kvharness.core.config import HarnessSettings, load_settings
from kvharness.harness.factories import CertificateClientFactory, KeyClientFactory
from kvharness.harness.session import KeyVaultTestSession

if TYPE_CHECKING:
    from azure.keyvault.certificates import CertificateClient
    from azure.keyvault.keys import KeyClient

    from kvharness.harness.factories import ClientFactory


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "live: scenario test against a real vault (replayed from recordings in playback)")


@pytest.fixture(scope="session")
def kv_settings() -> HarnessSettings:
    """Harness settings resolved once from the environment."""
    return load_settings()


def _open_session(request: pytest.FixtureRequest, settings: HarnessSettings, factory: ClientFactory[Any]) -> KeyVaultTestSession[Any]:
    session: KeyVaultTestSession[Any] = KeyVaultTestSession(settings, factory)
    test_name = request.node.name
    if settings.is_playback and not session.has_recording(test_name):
        pytest.skip(f"no recording for {test_name}; run with AZURE_TEST_MODE=record to create one")
    return session


@pytest.fixture
def key_vault_session(request: pytest.FixtureRequest, kv_settings: HarnessSettings) -> Iterator[KeyVaultTestSession[KeyClient]]:
    session = _open_session(request, kv_settings, KeyClientFactory())
    yield session
    session.close()


@pytest.fixture
def certificate_vault_session(
    request: pytest.FixtureRequest, kv_settings: HarnessSettings
) -> Iterator[KeyVaultTestSession[CertificateClient]]:
    session = _open_session(request, kv_settings, CertificateClientFactory())
    yield session
    session.close()


@pytest.fixture
def key_client(request: pytest.FixtureRequest, key_vault_session: KeyVaultTestSession[KeyClient]) -> KeyClient:
    """KeyClient with recording keyed to the requesting test."""
    return key_vault_session.get_client_for_test(request.node.name)


@pytest.fixture
def certificate_client(
    request: pytest.FixtureRequest, certificate_vault_session: KeyVaultTestSession[CertificateClient]
) -> CertificateClient:
    """CertificateClient with recording keyed to the requesting test."""
    return certificate_vault_session.get_client_for_test(request.node.name)
