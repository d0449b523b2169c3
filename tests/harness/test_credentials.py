# tests/harness/test_credentials.py
"""Tests for the playback credential and credential construction."""

import threading

from azure.identity import ClientSecretCredential

from kvharness.contracts.enums import CredentialKind
from kvharness.core.config import HarnessSettings
from kvharness.harness.credentials import EXPIRED, FAR_FUTURE_EXPIRY, FakeTokenCredential, build_credential

SCOPE = "https://vault.azure.net/.default"


class TestFakeTokenCredential:
    """The fake credential always hands out the same token."""

    def test_token_valid_for_scope(self) -> None:
        token = FakeTokenCredential().get_token(SCOPE)

        assert token.token == "magicToken"
        assert token.expires_on == FAR_FUTURE_EXPIRY

    def test_no_scopes_yields_expired_token(self) -> None:
        token = FakeTokenCredential().get_token()

        assert token.token == "magicToken"
        assert token.expires_on == EXPIRED

    def test_cancelled_request_yields_expired_token(self) -> None:
        cancelled = threading.Event()
        cancelled.set()

        token = FakeTokenCredential().get_token(SCOPE, cancel_event=cancelled)

        assert token.expires_on == EXPIRED

    def test_unset_cancel_event_ignored(self) -> None:
        token = FakeTokenCredential().get_token(SCOPE, cancel_event=threading.Event())

        assert token.expires_on == FAR_FUTURE_EXPIRY

    def test_sdk_keywords_accepted(self) -> None:
        token = FakeTokenCredential().get_token(SCOPE, claims="c", tenant_id="t", enable_cae=True)

        assert token.token == "magicToken"

    def test_token_info(self) -> None:
        credential = FakeTokenCredential()

        assert credential.get_token_info(SCOPE).expires_on == FAR_FUTURE_EXPIRY
        assert credential.get_token_info().expires_on == EXPIRED
        assert credential.get_token_info(SCOPE).token == "magicToken"

    def test_context_manager(self) -> None:
        with FakeTokenCredential() as credential:
            assert credential.get_token(SCOPE).token == "magicToken"

    def test_far_future_is_year_9999(self) -> None:
        assert FAR_FUTURE_EXPIRY == 253402214400


class TestBuildCredential:
    def test_fake(self, playback_settings: HarnessSettings) -> None:
        assert isinstance(build_credential(CredentialKind.FAKE, playback_settings), FakeTokenCredential)

    def test_client_secret(self, live_settings: HarnessSettings) -> None:
        credential = build_credential(CredentialKind.CLIENT_SECRET, live_settings)

        assert isinstance(credential, ClientSecretCredential)
        credential.close()
