"""
Monetization API views.

Endpoints:
    GET  /api/v1/monetization/earnings/                     - Creator earnings summary
    GET  /api/v1/monetization/earnings/ledger/              - Creator ledger entries
    GET  /api/v1/monetization/payouts/                      - Creator payout history
    POST /api/v1/monetization/payouts/                      - Request a payout
    GET  /api/v1/monetization/admin/payouts/                - Admin payout overview
    POST /api/v1/monetization/admin/payouts/{id}/process/   - Admin payout action
    GET  /api/v1/monetization/subscriptions/                - Fan's subscriptions
    POST /api/v1/monetization/subscriptions/                - Subscribe to a creator
    POST /api/v1/monetization/subscriptions/{id}/cancel/    - Cancel a subscription
    POST /api/v1/monetization/content/{id}/unlock/          - Buy pay-per-view content
    POST /api/v1/monetization/tips/                         - Tip a creator
    GET  /api/v1/monetization/access/{id}/                  - Access decision for content

Failed service results are answered with ServiceResult.to_response() and a
status picked from the error code (see _failure_response).
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsCreator, IsPlatformAdmin
from monetization.ledger.services import LedgerService
from monetization.serializers import (
    AccessDecisionSerializer,
    AdminPayoutSerializer,
    CancelSubscriptionSerializer,
    CheckoutSessionSerializer,
    EarningsSummarySerializer,
    LedgerEntrySerializer,
    PayoutActionSerializer,
    PayoutRequestSerializer,
    PayoutSerializer,
    PayoutStatusFilterSerializer,
    SubscribeSerializer,
    SubscriptionSerializer,
    TipSerializer,
)
from monetization.services import (
    AccessService,
    CheckoutService,
    PayoutService,
    SubscriptionService,
)

NOT_FOUND_CODES = {
    "CONTENT_NOT_FOUND",
    "PAYOUT_NOT_FOUND",
    "SUBSCRIPTION_NOT_FOUND",
}
FORBIDDEN_CODES = {"NOT_OWNER", "CREATOR_NOT_APPROVED"}
CONFLICT_CODES = {
    "ALREADY_SUBSCRIBED",
    "ALREADY_UNLOCKED",
    "PAYOUT_ALREADY_PENDING",
    "INVALID_PAYOUT_STATE",
    "INVALID_SUBSCRIPTION_STATE",
}


def _failure_response(result):
    code = status.HTTP_400_BAD_REQUEST
    if result.error_code in NOT_FOUND_CODES:
        code = status.HTTP_404_NOT_FOUND
    elif result.error_code in FORBIDDEN_CODES:
        code = status.HTTP_403_FORBIDDEN
    elif result.error_code in CONFLICT_CODES:
        code = status.HTTP_409_CONFLICT
    elif result.error_code == "PROVIDER_NOT_CONFIGURED":
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    return Response(result.to_response(), status=code)


def _checkout_response(result, success_status=status.HTTP_201_CREATED):
    if not result.success:
        return _failure_response(result)
    return Response(CheckoutSessionSerializer(result.data).data, status=success_status)


# =============================================================================
# Earnings
# =============================================================================


class EarningsView(APIView):
    permission_classes = [IsCreator]

    @extend_schema(
        summary="Creator earnings summary",
        description="Totals are aggregated from the ledger on every request.",
        responses={200: EarningsSummarySerializer},
        tags=["Earnings"],
    )
    def get(self, request):
        summary = LedgerService.summarize(request.user.pk)
        data = summary.as_dict()
        data["available_balance_cents"] = PayoutService.available_balance(request.user.pk)
        return Response(EarningsSummarySerializer(data).data)


class LedgerEntryListView(APIView):
    permission_classes = [IsCreator]

    @extend_schema(
        summary="Creator ledger entries",
        parameters=[
            OpenApiParameter("limit", OpenApiTypes.INT, description="Page size (max 200)"),
            OpenApiParameter("offset", OpenApiTypes.INT),
        ],
        responses={200: LedgerEntrySerializer(many=True)},
        tags=["Earnings"],
    )
    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", 50))
            offset = max(int(request.query_params.get("offset", 0)), 0)
        except ValueError:
            return Response(
                {"error": "limit and offset must be integers", "error_code": "VALIDATION_ERROR"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        entries = LedgerService.list_entries(request.user.pk, limit=limit, offset=offset)
        return Response(LedgerEntrySerializer(entries, many=True).data)


# =============================================================================
# Payouts
# =============================================================================


class PayoutListCreateView(APIView):
    permission_classes = [IsCreator]

    @extend_schema(
        summary="Creator payout history",
        responses={200: PayoutSerializer(many=True)},
        tags=["Payouts"],
    )
    def get(self, request):
        payouts = PayoutService.list_for_creator(request.user)
        return Response(PayoutSerializer(payouts, many=True).data)

    @extend_schema(
        summary="Request a payout",
        request=PayoutRequestSerializer,
        responses={201: PayoutSerializer},
        tags=["Payouts"],
    )
    def post(self, request):
        serializer = PayoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PayoutService.request_payout(
            request.user,
            serializer.validated_data["amount_cents"],
            method=serializer.validated_data["method"],
            details=serializer.validated_data["details"],
        )
        if not result.success:
            return _failure_response(result)
        return Response(PayoutSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AdminPayoutListView(APIView):
    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="Payout review queue",
        parameters=[PayoutStatusFilterSerializer],
        tags=["Admin"],
    )
    def get(self, request):
        filters = PayoutStatusFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        overview = PayoutService.admin_overview(
            status=filters.validated_data.get("status"),
            limit=filters.validated_data["limit"],
        )
        return Response(
            {
                "payouts": AdminPayoutSerializer(overview.payouts, many=True).data,
                "stats": overview.stats,
            }
        )


class AdminPayoutProcessView(APIView):
    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="Approve, reject or cancel a payout",
        request=PayoutActionSerializer,
        responses={200: AdminPayoutSerializer},
        tags=["Admin"],
    )
    def post(self, request, payout_id):
        serializer = PayoutActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PayoutService.admin_process(
            payout_id,
            serializer.validated_data["action"],
            admin=request.user,
            notes=serializer.validated_data["notes"],
            failure_reason=serializer.validated_data["failure_reason"],
        )
        if not result.success:
            return _failure_response(result)
        return Response(AdminPayoutSerializer(result.data).data)


# =============================================================================
# Subscriptions
# =============================================================================


class SubscriptionListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="My subscriptions",
        responses={200: SubscriptionSerializer(many=True)},
        tags=["Subscriptions"],
    )
    def get(self, request):
        subscriptions = SubscriptionService.list_for_fan(request.user)
        return Response(SubscriptionSerializer(subscriptions, many=True).data)

    @extend_schema(
        summary="Subscribe to a creator",
        description=(
            "Creates a pending subscription and starts checkout. With the mock "
            "provider the subscription is active when this returns; with CCBill "
            "`payment_url` must be opened to pay."
        ),
        request=SubscribeSerializer,
        responses={201: CheckoutSessionSerializer},
        tags=["Subscriptions"],
    )
    def post(self, request):
        serializer = SubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CheckoutService.start_subscription_checkout(
            request.user,
            serializer.validated_data["creator"],
            tier_name=serializer.validated_data["tier_name"],
        )
        return _checkout_response(result)


class SubscriptionCancelView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Cancel a subscription",
        description="By default access continues until the paid period ends.",
        request=CancelSubscriptionSerializer,
        responses={200: SubscriptionSerializer},
        tags=["Subscriptions"],
    )
    def post(self, request, subscription_id):
        serializer = CancelSubscriptionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = SubscriptionService.cancel(
            subscription_id,
            reason=serializer.validated_data["reason"],
            at_period_end=serializer.validated_data["at_period_end"],
            requested_by=request.user,
        )
        if not result.success:
            return _failure_response(result)
        return Response(SubscriptionSerializer(result.data).data)


# =============================================================================
# Purchases & Access
# =============================================================================


class ContentUnlockView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Unlock pay-per-view content",
        request=None,
        responses={201: CheckoutSessionSerializer},
        tags=["Purchases"],
    )
    def post(self, request, content_id):
        result = CheckoutService.start_content_unlock(request.user, content_id)
        return _checkout_response(result)


class TipView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Tip a creator",
        request=TipSerializer,
        responses={201: CheckoutSessionSerializer},
        tags=["Purchases"],
    )
    def post(self, request):
        serializer = TipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CheckoutService.start_tip(
            request.user,
            serializer.validated_data["creator"],
            serializer.validated_data["amount_cents"],
        )
        return _checkout_response(result)


class AccessCheckView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Can I view this content?",
        responses={200: AccessDecisionSerializer},
        tags=["Purchases"],
    )
    def get(self, request, content_id):
        decision = AccessService.check_access(request.user.pk, content_id)
        return Response(
            AccessDecisionSerializer(
                {"content_id": content_id, "allowed": decision.allowed, "reason": decision.reason}
            ).data
        )
