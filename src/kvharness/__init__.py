"""
kvharness: record/playback test harness for the Azure Key Vault Keys and
Certificates SDKs.

Runs the same scenario tests against a real vault (live), against a real
vault while capturing every HTTP interaction (record), or entirely offline
from those captures (playback).
"""

__version__ = "0.1.0"
