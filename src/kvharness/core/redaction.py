# src/kvharness/core/redaction.py
"""Redaction applied to everything that goes into a recording.

Recordings are committed to source control, so before an interaction is
written:
- the vault's host name is replaced by REDACTED (in URLs and bodies, since
  key/certificate identifiers embed the vault URL)
- headers that may carry credentials are dropped

The same URL redaction is applied to requests during playback so that a
signature computed against a live vault matches one computed against the
placeholder vault.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

REDACTED_LABEL = "REDACTED"
REDACTED_VAULT_URL = "https://REDACTED.vault.azure.net"
REDACTED_HSM_URL = "https://REDACTED.managedhsm.azure.net"

# First DNS label of a Key Vault or Managed HSM host, in any Azure cloud
# (vault.azure.net, vault.azure.cn, vault.usgovcloudapi.net, ...).
_VAULT_HOST_LABEL = re.compile(r"(?<=://)[A-Za-z0-9-]+(?=\.(?:vault|managedhsm)\.)")

# Exact names, lower-cased. Key Vault answers its first request of a session
# with a WWW-Authenticate challenge naming the tenant; azure-core sends the
# bearer token in Authorization.
_SENSITIVE_HEADERS_EXACT = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "www-authenticate",
        "proxy-authenticate",
        "x-ms-authorization-auxiliary",
        "cookie",
        "set-cookie",
    }
)

# Words that indicate sensitive content when they appear as complete
# delimiter-separated segments in header names.
# "X-Auth-Token" splits to {"x","auth","token"} and matches, but
# "X-Author" splits to {"x","author"} and does not.
_SENSITIVE_HEADER_WORDS = frozenset(
    {
        "auth",
        "authkey",
        "authtoken",
        "accesstoken",
        "apikey",
        "authorization",
        "key",
        "secret",
        "token",
        "password",
        "credential",
    }
)


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name indicates sensitive content.

    Args:
        header_name: Header name to check

    Returns:
        True if header likely contains secrets
    """
    lower_name = header_name.lower()
    if lower_name in _SENSITIVE_HEADERS_EXACT:
        return True
    segments = [seg for seg in re.split(r"[^a-z0-9]+", lower_name) if seg]
    if any(seg in _SENSITIVE_HEADER_WORDS for seg in segments):
        return True
    return lower_name.startswith("x") and lower_name[1:] in _SENSITIVE_HEADER_WORDS


def filter_headers(headers: dict[str, str] | None) -> dict[str, str]:
    """Drop sensitive headers, keeping the rest as-is.

    Unlike an audit trail there is no need to tell credentials apart in a
    recording, so sensitive values are removed rather than fingerprinted.
    """
    if not headers:
        return {}
    return {k: v for k, v in headers.items() if not is_sensitive_header(k)}


def redact_text(text: str) -> str:
    """Replace every vault host label in text with REDACTED."""
    return _VAULT_HOST_LABEL.sub(REDACTED_LABEL, text)


def redact_url(url: str) -> str:
    """Replace the vault host label in a URL with REDACTED."""
    return redact_text(url)


def request_signature(method: str, url: str) -> str:
    """Canonical signature used to match playback requests to recordings.

    Method plus path only: the host is redacted anyway, the query string
    carries the api-version and paging tokens, and bodies are not compared
    because Key Vault's challenge policy sends the first request of a
    session without one.

    Example:
        >>> request_signature("post", "https://myvault.vault.azure.net/keys/k1/create?api-version=7.5")
        'POST /keys/k1/create'
    """
    path = urlsplit(redact_url(url)).path or "/"
    return f"{method.upper()} {path}"
