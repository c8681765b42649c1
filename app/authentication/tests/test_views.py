"""
API tests for creator application and approval.
"""

import pytest
from django.urls import reverse

from authentication.models import CreatorStatus, User, UserRole
from notifications.models import Notification, NotificationType


@pytest.mark.django_db
class TestCreatorApply:
    def test_fan_applies(self, fan, authenticated_client):
        response = authenticated_client(fan).post(
            reverse("authentication:creator-apply"),
            {"display_name": "Night Owl", "subscription_price_cents": 1299},
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == UserRole.CREATOR
        assert data["creator_status"] == CreatorStatus.PENDING
        assert data["subscription_price_cents"] == 1299

    def test_existing_creator(self, creator, authenticated_client):
        response = authenticated_client(creator).post(
            reverse("authentication:creator-apply"), {"display_name": "Again"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "ALREADY_CREATOR"

    def test_display_name_required(self, fan, authenticated_client):
        response = authenticated_client(fan).post(
            reverse("authentication:creator-apply"), {}, format="json"
        )

        assert response.status_code == 400

    def test_anonymous(self, api_client):
        response = api_client.post(reverse("authentication:creator-apply"), {}, format="json")

        assert response.status_code == 401


@pytest.mark.django_db
class TestCreatorStatus:
    def test_own_status(self, pending_creator, authenticated_client):
        response = authenticated_client(pending_creator).get(reverse("authentication:creator-status"))

        assert response.status_code == 200
        assert response.json()["creator_status"] == CreatorStatus.PENDING


@pytest.mark.django_db
class TestCreatorDecision:
    def test_approve(
        self,
        pending_creator,
        platform_admin,
        authenticated_client,
        django_capture_on_commit_callbacks,
    ):
        url = reverse("authentication:creator-approve", args=[pending_creator.pk])

        with django_capture_on_commit_callbacks(execute=True):
            response = authenticated_client(platform_admin).post(url, {}, format="json")

        assert response.status_code == 200
        assert User.objects.get(pk=pending_creator.pk).creator_status == CreatorStatus.APPROVED
        assert Notification.objects.filter(
            recipient=pending_creator,
            notification_type=NotificationType.CREATOR_APPROVED,
        ).exists()

    def test_reject_with_reason(self, pending_creator, platform_admin, authenticated_client):
        url = reverse("authentication:creator-reject", args=[pending_creator.pk])

        response = authenticated_client(platform_admin).post(
            url, {"reason": "Documents unreadable"}, format="json"
        )

        assert response.json()["creator_status"] == CreatorStatus.REJECTED

    def test_requires_admin(self, pending_creator, creator, authenticated_client):
        url = reverse("authentication:creator-approve", args=[pending_creator.pk])

        response = authenticated_client(creator).post(url, {}, format="json")

        assert response.status_code == 403
        assert User.objects.get(pk=pending_creator.pk).creator_status == CreatorStatus.PENDING

    def test_unknown_user(self, platform_admin, authenticated_client):
        url = reverse("authentication:creator-approve", args=[999999])

        assert authenticated_client(platform_admin).post(url, {}, format="json").status_code == 404

    def test_fan_cannot_be_approved(self, fan, platform_admin, authenticated_client):
        url = reverse("authentication:creator-approve", args=[fan.pk])

        response = authenticated_client(platform_admin).post(url, {}, format="json")

        assert response.json()["error_code"] == "NOT_A_CREATOR"
