# tests/conftest.py
"""Shared test fixtures and configuration.

Harness fixtures (kv_settings, key_vault_session, certificate_vault_session,
key_client, certificate_client) come from kvharness.pytest_plugin.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/

Live scenario tests (tests/live/) are marked `live`. In the default playback
mode they skip unless a recording exists; run them against a real vault with:
    AZURE_TEST_MODE=record pytest -m live
"""

import os
from pathlib import Path

import pytest

# Must run before kvharness.assertions is imported anywhere
pytest.register_assert_rewrite("kvharness.assertions")

from hypothesis import Phase, Verbosity, settings  # noqa: E402

from kvharness.contracts.enums import TestMode  # noqa: E402
from kvharness.core.config import HarnessSettings  # noqa: E402
from tests.fixtures.settings import make_settings  # noqa: E402

pytest_plugins = ["kvharness.pytest_plugin"]


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Settings fixtures
# =============================================================================


@pytest.fixture
def playback_settings(tmp_path: Path) -> HarnessSettings:
    return make_settings(TestMode.PLAYBACK, tmp_path)


@pytest.fixture
def record_settings(tmp_path: Path) -> HarnessSettings:
    return make_settings(TestMode.RECORD, tmp_path)


@pytest.fixture
def live_settings(tmp_path: Path) -> HarnessSettings:
    return make_settings(TestMode.LIVE, tmp_path)
