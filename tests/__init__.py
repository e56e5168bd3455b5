# White Mousse Tests Package

"""
Test suite for the White Mousse Sales Intelligence dashboard.

This package contains:
- Unit tests for urgency, reorder cycle and revenue metrics
- Unit tests for the API client error taxonomy
- Loader tests for normalization and the partial-failure policy

Run tests:
    pytest
"""
