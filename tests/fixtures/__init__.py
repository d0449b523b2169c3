# tests/fixtures/__init__.py
"""Shared test doubles for kvharness tests.

Available modules:
- fake_vault: in-memory KeyClient/CertificateClient stand-ins with real
  azure.core ItemPaged listings
- settings: HarnessSettings builders for each test mode
"""
