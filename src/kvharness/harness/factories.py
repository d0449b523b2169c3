# src/kvharness/harness/factories.py
"""Service-specific client factories.

A factory knows how to build one kind of Key Vault client. The generic
record/playback harness knows nothing about keys or certificates; the two
are joined in KeyVaultTestSession.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential
    from azure.keyvault.certificates import CertificateClient
    from azure.keyvault.keys import KeyClient

ClientT_co = TypeVar("ClientT_co", covariant=True)


class ClientFactory(Protocol[ClientT_co]):
    """Builds a service client bound to a vault, credential and pipeline options."""

    def create(self, vault_url: str, credential: TokenCredential, **kwargs: Any) -> ClientT_co: ...


class KeyClientFactory:
    """Factory for azure.keyvault.keys.KeyClient."""

    def create(self, vault_url: str, credential: TokenCredential, **kwargs: Any) -> KeyClient:
        from azure.keyvault.keys import KeyClient

        return KeyClient(vault_url=vault_url, credential=credential, **kwargs)


class CertificateClientFactory:
    """Factory for azure.keyvault.certificates.CertificateClient."""

    def create(self, vault_url: str, credential: TokenCredential, **kwargs: Any) -> CertificateClient:
        from azure.keyvault.certificates import CertificateClient

        return CertificateClient(vault_url=vault_url, credential=credential, **kwargs)
