"""
Test suite for vectorcheck.

This package contains tests for all vectorcheck components:
- Unit tests for the transport, quality and runner layers
- End-to-end tests against the bundled mock vectorization service
"""
