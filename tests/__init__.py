# ECDH Vault Test Suite
"""
Test suite including:
- Unit tests per module
- Integration tests (two-party exchange)
- Security tests (invalid and tampered inputs)

Run with: pytest
"""
