"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures
(platform users and API clients). App-specific fixtures are defined in
each app's conftest.py.

Usage:
    def test_example(fan, creator, authenticated_client):
        response = authenticated_client(fan).get("/api/v1/monetization/subscriptions/")
        assert response.status_code == 200
"""

import os

import django
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # The test client speaks plain HTTP
    settings.SECURE_SSL_REDIRECT = False

    # No Redis under test
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
    }
    settings.SESSION_ENGINE = "django.contrib.sessions.backends.db"

    # Checkouts settle synchronously unless a test switches to CCBill
    settings.MONETIZATION_CHECKOUT_PROVIDER = "mock"

    # Settings are loaded before this hook runs, so eager mode is set on
    # the Celery app directly; no broker is needed under test
    from config import celery_app

    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_BROKER_URL = "memory://"
    settings.CELERY_RESULT_BACKEND = "cache+memory://"
    celery_app.conf.update(
        task_always_eager=True,
        broker_url="memory://",
        result_backend="cache+memory://",
    )


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full user journey workflows)
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_money.py, test_ccbill_adapter.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_handlers.py",
        "test_subscription_service.py",
        "test_access_service.py",
        "test_payout_service.py",
        "test_checkout_service.py",
        "test_reconciliation_service.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_money.py",
        "test_serializers.py",
        "test_managers.py",
        "test_ccbill_adapter.py",
        "test_events.py",
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
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            # Default: integration (safe for Django where most tests hit DB)
            item.add_marker(pytest.mark.integration)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def fan(db):
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def creator(db):
    """Approved creator with a $9.99 subscription price."""
    from authentication.tests.factories import CreatorFactory

    return CreatorFactory()


@pytest.fixture
def platform_admin(db):
    from authentication.tests.factories import AdminFactory

    return AdminFactory()


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def authenticated_client():
    """Return a factory that builds a JWT-authenticated client for a user."""

    def _client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _client
