"""Harness configuration loaded from the environment.

All settings come from environment variables (the same ones the Key Vault
SDK test suites use), validated into a frozen pydantic model:

    AZURE_TEST_MODE                 live | record | playback (default playback)
    AZURE_TENANT_ID                 service principal tenant
    AZURE_CLIENT_ID                 service principal client id
    AZURE_CLIENT_SECRET             service principal secret
    AZURE_KEYVAULT_URL              vault under test
    AZURE_KEYVAULT_HSM_URL          managed HSM under test (optional)
    AZURE_TEST_RECORDING_DIR        parent of the recordings/ directory
    AZURE_KEYVAULT_AVOID_THROTTLED  anything but "0" enables the cooldown sleep

In playback nothing reaches the network, so credentials and URLs fall back
to placeholders. In live and record mode they are required and a missing
one fails immediately, naming the variable.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from kvharness.contracts.enums import TestMode
from kvharness.contracts.errors import HarnessConfigurationError
from kvharness.core.redaction import REDACTED_VAULT_URL

TEST_MODE_VARIABLE = "AZURE_TEST_MODE"
AVOID_THROTTLED_VARIABLE = "AZURE_KEYVAULT_AVOID_THROTTLED"

# Placeholders used when playing back; they are never sent anywhere
PLAYBACK_DEFAULTS: dict[str, str] = {
    "AZURE_TENANT_ID": "tenant",
    "AZURE_CLIENT_ID": "client",
    "AZURE_CLIENT_SECRET": "secret",
    "AZURE_KEYVAULT_URL": REDACTED_VAULT_URL,
}


def get_env(name: str, default: str | None = None, environ: Mapping[str, str] | None = None) -> str:
    """Read an environment variable, falling back to a default.

    Empty values count as unset.

    Args:
        name: Variable name
        default: Returned when the variable is unset; None or "" means required
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        The variable's value or the default

    Raises:
        HarnessConfigurationError: If unset and no non-empty default given
    """
    env = os.environ if environ is None else environ
    value = env.get(name)
    if value:
        return value
    if default:
        return default
    raise HarnessConfigurationError(name)


def resolve_test_mode(environ: Mapping[str, str] | None = None) -> TestMode:
    """Resolve the test mode from AZURE_TEST_MODE (case-insensitive).

    Raises:
        HarnessConfigurationError: If the value is not live, record or playback
    """
    raw = get_env(TEST_MODE_VARIABLE, TestMode.PLAYBACK.value, environ)
    try:
        return TestMode(raw.strip().lower())
    except ValueError as e:
        raise HarnessConfigurationError(
            TEST_MODE_VARIABLE,
            f"{TEST_MODE_VARIABLE}={raw!r} is invalid; expected one of: {', '.join(m.value for m in TestMode)}",
        ) from e


class HarnessSettings(BaseModel):
    """Resolved configuration for one test-suite run."""

    model_config = {"frozen": True, "extra": "forbid"}

    mode: TestMode = Field(description="Transport mode for this run")
    tenant_id: str = Field(description="Service principal tenant id")
    client_id: str = Field(description="Service principal client id")
    client_secret: str = Field(repr=False, description="Service principal secret")
    vault_url: str = Field(description="Key Vault under test")
    hsm_url: str | None = Field(default=None, description="Managed HSM under test")
    recording_dir: Path = Field(description="Directory holding the recordings/ folder")
    avoid_throttled: bool = Field(default=False, description="Sleep before each client to avoid HTTP 429")

    @field_validator("vault_url", "hsm_url")
    @classmethod
    def validate_https(cls, v: str | None) -> str | None:
        """Key Vault refuses bearer tokens over plain HTTP, so catch it here."""
        if v is not None and not v.lower().startswith("https://"):
            raise ValueError(f"Vault URL must use https: {v}")
        return v.rstrip("/") if v is not None else v

    @property
    def recordings_path(self) -> Path:
        """Where per-test recording files live."""
        return self.recording_dir / "recordings"

    @property
    def is_playback(self) -> bool:
        return self.mode is TestMode.PLAYBACK


def load_settings(environ: Mapping[str, str] | None = None) -> HarnessSettings:
    """Build HarnessSettings from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Raises:
        HarnessConfigurationError: If a required variable is missing
    """
    mode = resolve_test_mode(environ)
    defaults = PLAYBACK_DEFAULTS if mode is TestMode.PLAYBACK else {}

    def _required(name: str) -> str:
        return get_env(name, defaults.get(name), environ)

    env = os.environ if environ is None else environ
    hsm_url = env.get("AZURE_KEYVAULT_HSM_URL") or None

    return HarnessSettings(
        mode=mode,
        tenant_id=_required("AZURE_TENANT_ID"),
        client_id=_required("AZURE_CLIENT_ID"),
        client_secret=_required("AZURE_CLIENT_SECRET"),
        vault_url=_required("AZURE_KEYVAULT_URL"),
        hsm_url=hsm_url,
        recording_dir=Path(get_env("AZURE_TEST_RECORDING_DIR", str(Path.cwd()), environ)),
        avoid_throttled=get_env(AVOID_THROTTLED_VARIABLE, "0", environ) != "0",
    )
