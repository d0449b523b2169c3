# src/kvharness/assertions.py
"""Assertion helpers shared by Key Vault scenario tests.

These use plain assert statements; tests/conftest.py registers this module
for pytest's assertion rewriting so failures show the compared values.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from azure.core.rest import HttpRequest

from kvharness.harness.polling import poll_until_done

if TYPE_CHECKING:
    from collections.abc import Sequence

    from azure.core.pipeline import PipelineResponse
    from azure.core.rest import HttpResponse
    from azure.keyvault.certificates import (
        CertificateClient,
        CertificateContact,
        CertificateContentType,
        CertificateIssuer,
        KeyVaultCertificate,
    )


class ResponseCapture:
    """raw_response_hook that remembers the last HTTP response.

    Example:
        capture = ResponseCapture()
        client.create_ec_key(name, raw_response_hook=capture)
        check_valid_response(capture)
    """

    def __init__(self) -> None:
        self.status_code: int | None = None
        self.headers: dict[str, str] = {}

    def __call__(self, response: PipelineResponse[Any, Any]) -> None:
        http_response = response.http_response
        self.status_code = http_response.status_code
        self.headers = dict(http_response.headers)


def check_valid_response(capture: ResponseCapture, expected: int = HTTPStatus.OK) -> None:
    """Assert the captured response carried the expected status code."""
    assert capture.status_code is not None, "no response was captured"
    assert capture.status_code == int(expected)


def check_issuers(data: CertificateIssuer, issuer: CertificateIssuer) -> None:
    """Compare an issuer read back from the vault with the one that was sent.

    The password is write-only, so the service must not echo it.
    """
    assert data.name == issuer.name
    assert data.provider == issuer.provider
    assert data.enabled is True
    assert data.id

    assert data.account_id == issuer.account_id
    assert not data.password

    admin_remote = data.admin_contacts[0]
    admin_local = issuer.admin_contacts[0]
    assert admin_local.email == admin_remote.email
    assert admin_local.first_name == admin_remote.first_name
    assert admin_local.last_name == admin_remote.last_name
    assert admin_local.phone == admin_remote.phone


def _contact_key(contact: CertificateContact) -> tuple[str | None, bool, bool]:
    return (contact.email, contact.name is not None, contact.phone is not None)


def check_contacts_collections(contacts: Sequence[CertificateContact], results: Sequence[CertificateContact]) -> None:
    """Assert two contact lists hold the same contacts, in any order.

    Contacts match on email address and on whether a name and a phone
    number are present.
    """
    assert len(results) == len(contacts)
    expected = [_contact_key(c) for c in contacts]
    actual = [_contact_key(c) for c in results]
    for key in actual:
        assert key in expected, f"unexpected contact {key}"
    for key in expected:
        assert key in actual, f"missing contact {key}"


def create_certificate(
    name: str,
    client: CertificateClient,
    default_wait: float,
    subject: str = "CN=xyz",
    content_type: CertificateContentType | None = None,
) -> KeyVaultCertificate:
    """Create a self-issued certificate and check the service applied its policy.

    Args:
        name: Certificate name
        client: Certificate client bound to the test vault
        default_wait: Polling interval (seconds)
        subject: X.509 subject
        content_type: Secret content type (defaults to PKCS#12)

    Returns:
        The created certificate, policy included
    """
    from azure.keyvault.certificates import (
        CertificateContentType,
        CertificatePolicy,
        CertificatePolicyAction,
        KeyUsageType,
        LifetimeAction,
    )

    content_type = content_type or CertificateContentType.pkcs12
    policy = CertificatePolicy(
        issuer_name="Self",
        subject=subject,
        validity_in_months=12,
        content_type=content_type,
        lifetime_actions=[LifetimeAction(action=CertificatePolicyAction.auto_renew, lifetime_percentage=80)],
    )

    poller = client.begin_create_certificate(name, policy, enabled=True, _polling_interval=default_wait)
    certificate: KeyVaultCertificate = poll_until_done(poller, default_wait)

    assert certificate.name == name
    assert certificate.properties.name == name
    assert certificate.properties.enabled is True

    result_policy = certificate.policy
    assert result_policy is not None
    assert result_policy.issuer_name == "Self"
    assert result_policy.content_type == content_type
    assert result_policy.subject == subject
    assert result_policy.validity_in_months == 12
    assert len(result_policy.lifetime_actions) == 1
    assert result_policy.lifetime_actions[0].action == CertificatePolicyAction.auto_renew
    assert result_policy.lifetime_actions[0].lifetime_percentage == 80
    assert set(result_policy.key_usage or []) == {KeyUsageType.digital_signature, KeyUsageType.key_encipherment}
    return certificate


@dataclass(frozen=True)
class DownloadCertificateResult:
    """Certificate payload read from the certificate's backing secret.

    Attributes:
        certificate: Secret value (base64 PKCS#12 or PEM text)
        content_type: Secret content type
        response: Raw response of the secret request
    """

    certificate: str
    content_type: CertificateContentType
    response: HttpResponse


def download_certificate(name: str, client: CertificateClient) -> DownloadCertificateResult:
    """Fetch a certificate's full payload (private key included).

    The certificate API only returns the public part; the complete payload
    lives in the secret the certificate points at, read here with a raw
    request through the certificate client's own pipeline.
    """
    from azure.keyvault.certificates import CertificateContentType

    certificate = client.get_certificate(name)
    secret_path = urlparse(certificate.secret_id).path
    response = client.send_request(HttpRequest("GET", secret_path))
    response.raise_for_status()
    secret = response.json()
    return DownloadCertificateResult(
        certificate=secret["value"],
        content_type=CertificateContentType(secret["contentType"]),
        response=response,
    )
