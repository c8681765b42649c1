"""
Test configuration and fixtures for authentication tests.

fan, creator, platform_admin and the API client fixtures come from the
root conftest.

Usage:
    def test_example(pending_creator, platform_admin, authenticated_client):
        response = authenticated_client(platform_admin).post(approve_url(pending_creator))
"""

import pytest

from authentication.models import CreatorStatus
from authentication.tests.factories import CreatorFactory


@pytest.fixture
def pending_creator(db):
    return CreatorFactory(creator_status=CreatorStatus.PENDING)
