# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Key Vault request shapes (methods, object paths, vault host labels)
- Page layouts (item counts and page sizes)

Usage:
    from tests.property.conftest import requests_strategy

    @given(calls=requests_strategy)
    def test_replay(calls: list[tuple[str, str]]) -> None:
        ...
"""

from hypothesis import strategies as st

# =============================================================================
# Hypothesis Settings
# =============================================================================
#
# For standardized @settings decorators, import from tests.property.settings:
#   from tests.property.settings import STANDARD_SETTINGS, DETERMINISM_SETTINGS
# =============================================================================

http_methods = st.sampled_from(["GET", "PUT", "POST", "PATCH", "DELETE"])

# Key Vault object names: 1-127 alphanumerics and dashes
object_names = st.from_regex(r"[A-Za-z0-9][A-Za-z0-9-]{0,30}", fullmatch=True)

collections = st.sampled_from(["keys", "deletedkeys", "certificates", "deletedcertificates", "secrets"])

object_paths = st.builds(lambda c, n: f"/{c}/{n}", collections, object_names)

requests_strategy = st.lists(st.tuples(http_methods, object_paths), min_size=1, max_size=20)

# DNS label of a vault host (no dots, may contain dashes)
vault_labels = st.from_regex(r"[a-z0-9](?:[a-z0-9-]{0,20}[a-z0-9])?", fullmatch=True)

page_sizes = st.integers(min_value=1, max_value=25)
item_counts = st.integers(min_value=1, max_value=200)
