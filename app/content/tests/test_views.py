"""
API tests for posts and live streams.
"""

import uuid

import pytest
from django.urls import reverse

from authentication.models import CreatorStatus
from authentication.tests.factories import CreatorFactory
from content.models import Post, Visibility
from content.tests.factories import LiveStreamFactory, PostFactory
from monetization.tests.factories import SubscriptionFactory


def detail_url(content):
    return reverse("content:content-detail", args=[content.pk])


@pytest.mark.django_db
class TestPublishing:
    def test_create_ppv_post(self, creator, authenticated_client):
        response = authenticated_client(creator).post(
            reverse("content:post-create"),
            {"title": "Behind the scenes", "body": "...", "visibility": "ppv", "price_cents": 499},
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["price_cents"] == 499
        assert Post.objects.get().creator == creator

    def test_price_ignored_for_subscriber_posts(self, creator, authenticated_client):
        response = authenticated_client(creator).post(
            reverse("content:post-create"),
            {"title": "Update", "visibility": "subscriber", "price_cents": 499},
            format="json",
        )

        assert response.json()["price_cents"] == 0

    def test_ppv_needs_price(self, creator, authenticated_client):
        response = authenticated_client(creator).post(
            reverse("content:post-create"),
            {"title": "Free lunch", "visibility": "ppv"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PRICE"

    def test_unapproved_creator(self, authenticated_client):
        creator = CreatorFactory(creator_status=CreatorStatus.PENDING)

        response = authenticated_client(creator).post(
            reverse("content:post-create"), {"title": "Hello"}, format="json"
        )

        assert response.status_code == 403

    def test_fans_cannot_publish(self, fan, authenticated_client):
        response = authenticated_client(fan).post(
            reverse("content:post-create"), {"title": "Hello"}, format="json"
        )

        assert response.status_code == 403

    def test_schedule_stream(self, creator, authenticated_client):
        response = authenticated_client(creator).post(
            reverse("content:stream-create"),
            {"title": "Q&A", "visibility": "ppv", "price_cents": 1500},
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["status"] == "scheduled"


@pytest.mark.django_db
class TestDetail:
    def test_locked_for_non_subscriber(self, fan, creator, authenticated_client):
        post = PostFactory(creator=creator)

        data = authenticated_client(fan).get(detail_url(post)).json()

        assert data["locked"] is True
        assert data["access_reason"] == "subscription_required"
        assert data["body"] is None
        assert data["title"] == post.title

    def test_unlocked_for_subscriber(self, fan, creator, authenticated_client):
        SubscriptionFactory(fan=fan, creator=creator, active=True)
        post = PostFactory(creator=creator)

        data = authenticated_client(fan).get(detail_url(post)).json()

        assert data["locked"] is False
        assert data["body"] == "Members-only words"

    def test_stream_description_is_locked(self, fan, creator, authenticated_client):
        stream = LiveStreamFactory(creator=creator, description="Link inside")

        data = authenticated_client(fan).get(detail_url(stream)).json()

        assert data["locked"] is True
        assert data["access_reason"] == "purchase_required"
        assert data["description"] is None

    def test_owner_sees_everything(self, creator, authenticated_client):
        post = PostFactory(creator=creator, visibility=Visibility.PPV, price_cents=499)

        data = authenticated_client(creator).get(detail_url(post)).json()

        assert data["locked"] is False
        assert data["access_reason"] == "owner"

    def test_disabled_content_is_hidden(self, fan, creator, authenticated_client):
        post = PostFactory(creator=creator, visibility=Visibility.FREE, is_disabled=True)

        assert authenticated_client(fan).get(detail_url(post)).status_code == 404

        owner_view = authenticated_client(creator).get(detail_url(post)).json()
        assert owner_view["locked"] is True
        assert owner_view["access_reason"] == "disabled"

    def test_unknown_content(self, fan, authenticated_client):
        url = reverse("content:content-detail", args=[uuid.uuid4()])

        assert authenticated_client(fan).get(url).status_code == 404


@pytest.mark.django_db
class TestModeration:
    def test_disable_and_enable(self, platform_admin, authenticated_client):
        post = PostFactory()
        client = authenticated_client(platform_admin)

        response = client.post(reverse("content:content-disable", args=[post.pk]))

        assert response.status_code == 200
        assert response.json()["is_disabled"] is True

        response = client.post(reverse("content:content-enable", args=[post.pk]))

        assert response.json()["is_disabled"] is False
        assert Post.objects.get(pk=post.pk).disabled_at is None

    def test_requires_admin(self, creator, authenticated_client):
        post = PostFactory(creator=creator)

        response = authenticated_client(creator).post(reverse("content:content-disable", args=[post.pk]))

        assert response.status_code == 403

    def test_unknown_content(self, platform_admin, authenticated_client):
        url = reverse("content:content-disable", args=[uuid.uuid4()])

        assert authenticated_client(platform_admin).post(url).status_code == 404
