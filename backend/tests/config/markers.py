"""
Pytest markers and collection rules for the parlor booking tests.

Markers are declared here and in pyproject.toml; tests are also tagged
automatically from their location and file name.
"""

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "services: mark test as service layer test")
    config.addinivalue_line("markers", "appointment: mark test as appointment-related")
    config.addinivalue_line("markers", "customer: mark test as customer-related")
    config.addinivalue_line("markers", "catalog: mark test as service catalog related")
    config.addinivalue_line("markers", "api: mark test as API endpoint test")
    config.addinivalue_line(
        "markers", "concurrency: mark test as exercising concurrent bookings"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test items during collection."""
    for item in items:
        path = str(item.path)

        if "unit" in path:
            item.add_marker(pytest.mark.unit)

        if "integration" in path:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.api)

        if "appointment" in path or "availability" in path or "conflict" in path:
            item.add_marker(pytest.mark.appointment)

        if "customer" in path:
            item.add_marker(pytest.mark.customer)

        if "catalog" in path or "services_api" in path:
            item.add_marker(pytest.mark.catalog)

        if "_service" in path:
            item.add_marker(pytest.mark.services)
