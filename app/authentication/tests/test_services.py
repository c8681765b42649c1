"""
Tests for CreatorService.

Covers the creator application flow and the approval gate used by the
subscription and content services.
"""

from unittest.mock import patch

import pytest

from authentication.models import CreatorStatus, User, UserRole
from authentication.services import CreatorService
from authentication.tests.factories import AdminFactory, CreatorFactory, UserFactory


@pytest.mark.django_db
class TestIsCreatorApproved:
    def test_approved_creator(self):
        assert CreatorService.is_creator_approved(CreatorFactory().pk) is True

    def test_pending_creator(self):
        creator = CreatorFactory(creator_status=CreatorStatus.PENDING)
        assert CreatorService.is_creator_approved(creator.pk) is False

    def test_fan_is_not_a_creator(self):
        assert CreatorService.is_creator_approved(UserFactory().pk) is False

    def test_unknown_and_missing_ids(self):
        assert CreatorService.is_creator_approved(999999) is False
        assert CreatorService.is_creator_approved(None) is False


@pytest.mark.django_db
class TestApply:
    def test_fan_becomes_pending_creator(self):
        fan = UserFactory()

        result = CreatorService.apply(fan, display_name="  Night Owl ", subscription_price_cents=1299)

        assert result.success
        fan.refresh_from_db()
        assert fan.role == UserRole.CREATOR
        assert fan.creator_status == CreatorStatus.PENDING
        assert fan.display_name == "Night Owl"
        assert fan.subscription_price_cents == 1299

    def test_existing_creator_cannot_apply(self):
        result = CreatorService.apply(CreatorFactory(), display_name="Again")

        assert result.error_code == "ALREADY_CREATOR"

    def test_display_name_required(self):
        result = CreatorService.apply(UserFactory(), display_name="   ")

        assert result.error_code == "VALIDATION_ERROR"
        assert "display_name" in result.errors

    def test_blank_display_name_leaves_user_a_fan(self):
        user = UserFactory()

        result = CreatorService.apply(user, display_name="")

        assert not result.success
        user = User.objects.get(pk=user.pk)
        assert user.role == UserRole.FAN
        assert user.creator_status == CreatorStatus.NOT_APPLIED

    def test_negative_price_rejected(self):
        result = CreatorService.apply(UserFactory(), display_name="X", subscription_price_cents=-1)

        assert result.error_code == "INVALID_PRICE"


@pytest.mark.django_db
class TestDecide:
    def test_approve_sets_status_and_notifies(self):
        creator = CreatorFactory(creator_status=CreatorStatus.PENDING)

        with patch("authentication.services.notify") as mock_notify:
            result = CreatorService.approve(creator.pk, admin=AdminFactory())

        assert result.success
        creator.refresh_from_db()
        assert creator.creator_status == CreatorStatus.APPROVED
        assert mock_notify.call_args.args[0] == "creator_approved"
        assert mock_notify.call_args.args[1] == creator.pk

    def test_reject_sets_status(self):
        creator = CreatorFactory(creator_status=CreatorStatus.PENDING)

        result = CreatorService.reject(creator.pk, admin=AdminFactory(), reason="Blurry ID")

        assert result.success
        creator.refresh_from_db()
        assert creator.creator_status == CreatorStatus.REJECTED

    def test_cannot_decide_on_a_fan(self):
        result = CreatorService.approve(UserFactory().pk, admin=AdminFactory())

        assert result.error_code == "NOT_A_CREATOR"

    def test_unknown_user(self):
        result = CreatorService.approve(424242, admin=AdminFactory())

        assert result.error_code == "USER_NOT_FOUND"
