"""Test package for vibemap.

This package contains:
- Unit tests (test_aggregation.py, test_index.py, test_vibes.py, ...)
- Integration tests (test_integration.py)
- Shared fixtures (conftest.py) and helpers (helpers.py)
"""
