"""
Creator account views.

Endpoints:
    POST /api/v1/auth/creators/apply/                 - Fan applies to become a creator
    GET  /api/v1/auth/creators/status/                - Own creator status
    POST /api/v1/auth/admin/creators/{id}/approve/    - Admin approves
    POST /api/v1/auth/admin/creators/{id}/reject/     - Admin rejects
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsPlatformAdmin
from authentication.serializers import (
    CreatorApplicationSerializer,
    CreatorDecisionSerializer,
    CreatorStatusSerializer,
)
from authentication.services import CreatorService


def _failure_response(result):
    code = status.HTTP_404_NOT_FOUND if result.error_code == "USER_NOT_FOUND" else status.HTTP_400_BAD_REQUEST
    return Response(result.to_response(), status=code)


class CreatorApplyView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Apply to become a creator",
        request=CreatorApplicationSerializer,
        responses={201: CreatorStatusSerializer},
        tags=["Creators"],
    )
    def post(self, request):
        serializer = CreatorApplicationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CreatorService.apply(request.user, **serializer.validated_data)
        if not result.success:
            return _failure_response(result)
        return Response(CreatorStatusSerializer(result.data).data, status=status.HTTP_201_CREATED)


class CreatorStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get own creator status",
        responses={200: CreatorStatusSerializer},
        tags=["Creators"],
    )
    def get(self, request):
        return Response(CreatorStatusSerializer(request.user).data)


class AdminCreatorDecisionView(APIView):
    permission_classes = [IsPlatformAdmin]
    approve = True

    @extend_schema(
        summary="Approve or reject a creator",
        request=CreatorDecisionSerializer,
        responses={200: CreatorStatusSerializer},
        tags=["Admin"],
    )
    def post(self, request, user_id):
        serializer = CreatorDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if self.approve:
            result = CreatorService.approve(user_id, admin=request.user)
        else:
            result = CreatorService.reject(
                user_id, admin=request.user, reason=serializer.validated_data["reason"]
            )
        if not result.success:
            return _failure_response(result)
        return Response(CreatorStatusSerializer(result.data).data)
