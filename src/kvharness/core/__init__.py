# src/kvharness/core/__init__.py
"""Core infrastructure: configuration, canonical hashing, redaction, logging."""

from kvharness.core.canonical import CANONICAL_VERSION, canonical_json, stable_hash
from kvharness.core.config import HarnessSettings, get_env, load_settings, resolve_test_mode
from kvharness.core.redaction import (
    REDACTED_HSM_URL,
    REDACTED_VAULT_URL,
    filter_headers,
    is_sensitive_header,
    redact_text,
    redact_url,
    request_signature,
)

__all__ = [
    "CANONICAL_VERSION",
    "REDACTED_HSM_URL",
    "REDACTED_VAULT_URL",
    "HarnessSettings",
    "canonical_json",
    "filter_headers",
    "get_env",
    "is_sensitive_header",
    "load_settings",
    "redact_text",
    "redact_url",
    "request_signature",
    "resolve_test_mode",
    "stable_hash",
]
