# src/kvharness/harness/credentials.py
"""Credentials handed to service clients.

Live and record runs authenticate as a service principal
(azure.identity.ClientSecretCredential). Playback runs use
FakeTokenCredential: the canned transport never checks tokens, but the SDK
still asks for one.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from types import TracebackType
from typing import TYPE_CHECKING, Any

from azure.core.credentials import AccessToken, AccessTokenInfo

from kvharness.contracts.enums import CredentialKind

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential, TokenRequestOptions

    from kvharness.core.config import HarnessSettings

# Expiry used for tokens that should never need refreshing
FAR_FUTURE_EXPIRY = int(datetime(9999, 12, 31, tzinfo=UTC).timestamp())
# Expiry used for tokens that must be treated as invalid
EXPIRED = 0


class FakeTokenCredential:
    """Token credential returning a fixed token.

    The token is valid until the far future, unless no scopes were
    requested or the caller's cancellation event is already set; then it
    comes back already expired, which any consumer checking expiry treats
    as invalid.

    Example:
        credential = FakeTokenCredential()
        credential.get_token("https://vault.azure.net/.default").token  # "magicToken"
        credential.get_token().expires_on  # 0
    """

    TOKEN = "magicToken"

    def get_token(
        self,
        *scopes: str,
        claims: str | None = None,
        tenant_id: str | None = None,
        enable_cae: bool = False,
        **kwargs: Any,
    ) -> AccessToken:
        """Return the fixed token.

        Args:
            scopes: Requested scopes; none at all yields an expired token
            cancel_event: Optional threading.Event; if set, yields an expired token
        """
        cancel_event: threading.Event | None = kwargs.get("cancel_event")
        return AccessToken(self.TOKEN, self._expiry(scopes, cancel_event))

    def get_token_info(self, *scopes: str, options: TokenRequestOptions | None = None) -> AccessTokenInfo:
        """Same as get_token, for pipelines using the newer token-info protocol."""
        return AccessTokenInfo(self.TOKEN, self._expiry(scopes, None))

    @staticmethod
    def _expiry(scopes: tuple[str, ...], cancel_event: threading.Event | None) -> int:
        if (cancel_event is not None and cancel_event.is_set()) or len(scopes) == 0:
            return EXPIRED
        return FAR_FUTURE_EXPIRY

    def close(self) -> None:
        pass

    def __enter__(self) -> FakeTokenCredential:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def build_credential(kind: CredentialKind, settings: HarnessSettings) -> TokenCredential | FakeTokenCredential:
    """Create the credential a transport binding asks for.

    Args:
        kind: Credential kind from the TransportBinding
        settings: Harness settings holding the service principal

    Returns:
        ClientSecretCredential for CLIENT_SECRET, FakeTokenCredential for FAKE
    """
    if kind is CredentialKind.FAKE:
        return FakeTokenCredential()

    from azure.identity import ClientSecretCredential

    return ClientSecretCredential(
        tenant_id=settings.tenant_id,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
    )
