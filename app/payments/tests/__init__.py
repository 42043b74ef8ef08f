"""
Tests for payments app.

This package contains test modules for:
- test_signatures.py: HMAC signing and verification
- test_order_lifecycle.py: Order creation and state machine
- test_concurrency.py: Concurrent confirmations and id uniqueness
- test_views.py: API endpoint tests

Usage:
    pytest app/payments/tests/
    pytest app/payments/tests/test_order_lifecycle.py
"""
