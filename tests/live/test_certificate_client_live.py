# tests/live/test_certificate_client_live.py
"""Scenario tests for CertificateClient against a real vault or its recordings."""

from __future__ import annotations

from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest
from azure.keyvault.certificates import AdministratorContact, CertificateContact, CertificateContentType

from kvharness.assertions import check_contacts_collections, check_issuers, create_certificate, download_certificate

if TYPE_CHECKING:
    from azure.keyvault.certificates import CertificateClient

    from kvharness.harness.session import KeyVaultTestSession

pytestmark = pytest.mark.live


class TestCertificateClient:
    def test_create_certificate(
        self,
        certificate_vault_session: KeyVaultTestSession[CertificateClient],
        certificate_client: CertificateClient,
    ) -> None:
        name = certificate_vault_session.context.unique_name()

        certificate = create_certificate(name, certificate_client, certificate_vault_session.default_wait)

        assert certificate.cer

    def test_download_certificate_pkcs12(
        self,
        certificate_vault_session: KeyVaultTestSession[CertificateClient],
        certificate_client: CertificateClient,
    ) -> None:
        name = certificate_vault_session.context.unique_name()
        create_certificate(name, certificate_client, certificate_vault_session.default_wait)

        result = download_certificate(name, certificate_client)

        assert result.content_type == CertificateContentType.pkcs12
        assert result.certificate

    def test_download_certificate_pem(
        self,
        certificate_vault_session: KeyVaultTestSession[CertificateClient],
        certificate_client: CertificateClient,
    ) -> None:
        name = certificate_vault_session.context.unique_name()
        create_certificate(
            name,
            certificate_client,
            certificate_vault_session.default_wait,
            content_type=CertificateContentType.pem,
        )

        result = download_certificate(name, certificate_client)

        assert result.content_type == CertificateContentType.pem
        assert "-----BEGIN CERTIFICATE-----" in result.certificate

    def test_issuer_round_trip(
        self,
        certificate_vault_session: KeyVaultTestSession[CertificateClient],
        certificate_client: CertificateClient,
    ) -> None:
        issuer_name = certificate_vault_session.context.unique_name()
        admin = AdministratorContact(first_name="John", last_name="Doe", email="admin@contoso.com", phone="4255555555")
        expected = SimpleNamespace(name=issuer_name, provider="Test", account_id="keyvaultuser", admin_contacts=[admin])

        certificate_client.create_issuer(
            issuer_name,
            provider="Test",
            account_id="keyvaultuser",
            password="password",
            admin_contacts=[admin],
            enabled=True,
        )
        try:
            check_issuers(certificate_client.get_issuer(issuer_name), expected)  # type: ignore[arg-type]
        finally:
            certificate_client.delete_issuer(issuer_name)

    def test_contacts_round_trip(self, certificate_client: CertificateClient) -> None:
        contacts = [
            CertificateContact(email="one@contoso.com", name="One", phone="1111111111"),
            CertificateContact(email="two@contoso.com", name="Two"),
        ]

        certificate_client.set_contacts(contacts)
        try:
            check_contacts_collections(contacts, certificate_client.get_contacts())
        finally:
            certificate_client.delete_contacts()
