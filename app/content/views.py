"""
Post and live stream views.

Endpoints:
    POST /api/v1/content/posts/               - Publish a post
    POST /api/v1/content/streams/             - Schedule a live stream
    GET  /api/v1/content/{id}/                - Detail; paid fields hidden without access
    POST /api/v1/content/{id}/disable/        - Admin takedown
    POST /api/v1/content/{id}/enable/         - Admin restore
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsCreator, IsPlatformAdmin
from content.models import Post
from content.serializers import (
    LiveStreamSerializer,
    PostCreateSerializer,
    PostSerializer,
    StreamCreateSerializer,
)
from content.services import ContentService
from monetization.services.access_service import AccessService

LOCKED_FIELDS = ("body", "description")


def _failure_response(result):
    code = status.HTTP_400_BAD_REQUEST
    if result.error_code == "CREATOR_NOT_APPROVED":
        code = status.HTTP_403_FORBIDDEN
    elif result.error_code == "CONTENT_NOT_FOUND":
        code = status.HTTP_404_NOT_FOUND
    return Response(result.to_response(), status=code)


def _serialize(content):
    if isinstance(content, Post):
        return PostSerializer(content).data
    return LiveStreamSerializer(content).data


class PostCreateView(APIView):
    permission_classes = [IsCreator]

    @extend_schema(
        summary="Publish a post",
        request=PostCreateSerializer,
        responses={201: PostSerializer},
        tags=["Content"],
    )
    def post(self, request):
        serializer = PostCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ContentService.create_post(request.user, **serializer.validated_data)
        if not result.success:
            return _failure_response(result)
        return Response(PostSerializer(result.data).data, status=status.HTTP_201_CREATED)


class StreamCreateView(APIView):
    permission_classes = [IsCreator]

    @extend_schema(
        summary="Schedule a live stream",
        request=StreamCreateSerializer,
        responses={201: LiveStreamSerializer},
        tags=["Content"],
    )
    def post(self, request):
        serializer = StreamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ContentService.create_stream(request.user, **serializer.validated_data)
        if not result.success:
            return _failure_response(result)
        return Response(LiveStreamSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ContentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get a post or stream",
        description="Paid fields are blanked and `locked` is true when the caller has no access.",
        tags=["Content"],
    )
    def get(self, request, content_id):
        content = ContentService.get_content(content_id)
        if content is None or (content.is_disabled and content.creator_id != request.user.pk):
            return Response({"error": "Content not found", "error_code": "CONTENT_NOT_FOUND"}, status=404)

        decision = AccessService.check_access(request.user.pk, content.pk)
        data = dict(_serialize(content))
        if not decision.allowed:
            for field in LOCKED_FIELDS:
                if field in data:
                    data[field] = None
        data["locked"] = not decision.allowed
        data["access_reason"] = decision.reason
        return Response(data)


class AdminContentToggleView(APIView):
    permission_classes = [IsPlatformAdmin]
    disable = True

    @extend_schema(summary="Disable or enable content", request=None, tags=["Admin"])
    def post(self, request, content_id):
        if self.disable:
            result = ContentService.disable(content_id, admin=request.user)
        else:
            result = ContentService.enable(content_id, admin=request.user)
        if not result.success:
            return _failure_response(result)
        return Response(_serialize(result.data))
