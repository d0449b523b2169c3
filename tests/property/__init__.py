# tests/property/__init__.py
"""Property-based tests for kvharness.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. Playback is only useful if it
is deterministic, so most properties here are about replay and hashing.

Test modules:
- test_paging_properties: page counts and item order over ItemPaged
- test_replay_properties: ordered, repeatable replay
- test_signature_properties: redaction and signature hashing
"""
