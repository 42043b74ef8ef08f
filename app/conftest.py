"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_concurrency.py → e2e (many threads against one order)
    - test_views.py, test_order_lifecycle.py, test_dispatcher.py,
      test_health_check.py → integration
    - test_signatures.py, test_records.py, test_locks.py, etc. → unit
    - Unmatched files → unit

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_concurrency.py"]

    integration_patterns = [
        "test_views.py",
        "test_order_lifecycle.py",
        "test_dispatcher.py",
        "test_health_check.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_payment_stores():
    """Give every test empty process-local payment stores."""
    from payments.stores import reset_memory_stores

    reset_memory_stores()
    yield
    reset_memory_stores()
