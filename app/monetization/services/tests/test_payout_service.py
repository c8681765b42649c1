"""
Tests for PayoutService.

Covers payout requests against the ledger balance, the admin actions and
the ledger entry written on approval.
"""

import uuid

import pytest

from authentication.tests.factories import CreatorFactory
from monetization.ledger.models import LedgerEntry
from monetization.ledger.services import LedgerService
from monetization.models import Payout
from monetization.services import PayoutService
from monetization.state_machines import LedgerEntryType, PayoutMethod, PayoutState
from monetization.tests.factories import PayoutFactory
from notifications.models import Notification, NotificationType


@pytest.mark.django_db
class TestAvailableBalance:
    def test_balance_minus_open_payouts(self, funded_creator):
        assert PayoutService.available_balance(funded_creator.pk) == 8000

        PayoutFactory(creator=funded_creator, amount_cents=3000)

        assert PayoutService.available_balance(funded_creator.pk) == 5000

    def test_closed_payouts_are_not_held(self, funded_creator):
        PayoutFactory(creator=funded_creator, amount_cents=3000, state=PayoutState.FAILED)

        assert PayoutService.available_balance(funded_creator.pk) == 8000


@pytest.mark.django_db
class TestRequestPayout:
    def test_creates_pending_payout(self, funded_creator):
        result = PayoutService.request_payout(
            funded_creator,
            8000,
            method=PayoutMethod.PAXUM,
            details={"email": "creator@example.com"},
        )

        assert result.success
        payout = result.data
        assert payout.state == PayoutState.PENDING
        assert payout.amount_cents == 8000
        assert payout.method_details == {"email": "creator@example.com"}
        # Nothing leaves the ledger until approval
        assert LedgerService.get_balance(funded_creator.pk) == 8000

    def test_below_minimum(self, funded_creator):
        result = PayoutService.request_payout(funded_creator, 999)

        assert result.error_code == "BELOW_MINIMUM"

    def test_insufficient_balance(self, funded_creator):
        result = PayoutService.request_payout(funded_creator, 8001)

        assert result.error_code == "INSUFFICIENT_BALANCE"
        assert not Payout.objects.exists()

    def test_creator_without_earnings(self, creator):
        result = PayoutService.request_payout(creator, 1000)

        assert result.error_code == "INSUFFICIENT_BALANCE"

    def test_unknown_method(self, funded_creator):
        result = PayoutService.request_payout(funded_creator, 1000, method="cheque")

        assert result.error_code == "INVALID_METHOD"

    def test_one_open_payout_at_a_time(self, funded_creator, pending_payout):
        result = PayoutService.request_payout(funded_creator, 1000)

        assert result.error_code == "PAYOUT_ALREADY_PENDING"


@pytest.mark.django_db
class TestAdminProcess:
    def test_approve_writes_payout_entry(
        self, pending_payout, platform_admin, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            result = PayoutService.admin_process(
                pending_payout.id, "approve", platform_admin, notes="Sent"
            )

        assert result.success
        payout = Payout.objects.get(pk=pending_payout.id)
        assert payout.state == PayoutState.COMPLETED
        assert payout.processed_by == platform_admin
        assert payout.admin_notes == "Sent"

        entry = payout.ledger_entry
        assert entry.entry_type == LedgerEntryType.PAYOUT
        assert entry.net_cents == -5000
        assert entry.idempotency_key == f"payout:{payout.id}"
        assert LedgerService.get_balance(payout.creator_id) == 3000

        assert Notification.objects.filter(
            recipient_id=payout.creator_id,
            notification_type=NotificationType.PAYOUT_COMPLETED,
        ).exists()

    def test_process_then_complete(self, pending_payout, platform_admin):
        assert PayoutService.admin_process(pending_payout.id, "process", platform_admin).success
        assert Payout.objects.get(pk=pending_payout.id).state == PayoutState.PROCESSING

        result = PayoutService.admin_process(pending_payout.id, "complete", platform_admin)

        assert result.data.state == PayoutState.COMPLETED
        assert LedgerEntry.objects.filter(entry_type=LedgerEntryType.PAYOUT).count() == 1

    def test_reject_requires_reason(self, pending_payout, platform_admin):
        result = PayoutService.admin_process(pending_payout.id, "reject", platform_admin)

        assert result.error_code == "FAILURE_REASON_REQUIRED"
        assert Payout.objects.get(pk=pending_payout.id).state == PayoutState.PENDING

    def test_reject_leaves_ledger_untouched(self, pending_payout, platform_admin):
        result = PayoutService.admin_process(
            pending_payout.id, "reject", platform_admin, failure_reason="Invalid IBAN"
        )

        assert result.data.state == PayoutState.FAILED
        assert result.data.failure_reason == "Invalid IBAN"
        assert LedgerService.get_balance(pending_payout.creator_id) == 8000
        assert PayoutService.available_balance(pending_payout.creator_id) == 8000

    def test_cancel(self, pending_payout, platform_admin):
        result = PayoutService.admin_process(pending_payout.id, "cancel", platform_admin)

        assert result.data.state == PayoutState.CANCELLED

    def test_closed_payout_cannot_be_processed_again(self, pending_payout, platform_admin):
        PayoutService.admin_process(pending_payout.id, "approve", platform_admin)

        result = PayoutService.admin_process(pending_payout.id, "approve", platform_admin)

        assert result.error_code == "INVALID_PAYOUT_STATE"
        assert LedgerService.get_balance(pending_payout.creator_id) == 3000

    def test_processing_cannot_go_back_to_processing(self, pending_payout, platform_admin):
        PayoutService.admin_process(pending_payout.id, "process", platform_admin)

        result = PayoutService.admin_process(pending_payout.id, "process", platform_admin)

        assert result.error_code == "INVALID_PAYOUT_STATE"

    def test_unknown_action(self, pending_payout, platform_admin):
        result = PayoutService.admin_process(pending_payout.id, "refund", platform_admin)

        assert result.error_code == "INVALID_ACTION"

    def test_unknown_payout(self, platform_admin):
        result = PayoutService.admin_process(uuid.uuid4(), "approve", platform_admin)

        assert result.error_code == "PAYOUT_NOT_FOUND"


@pytest.mark.django_db
class TestListings:
    def test_list_for_creator(self, funded_creator, pending_payout):
        PayoutFactory()

        assert list(PayoutService.list_for_creator(funded_creator)) == [pending_payout]

    def test_admin_overview_stats(self, pending_payout, platform_admin):
        other = CreatorFactory()
        PayoutFactory(creator=other, amount_cents=2500, state=PayoutState.COMPLETED)

        overview = PayoutService.admin_overview()

        assert len(overview.payouts) == 2
        assert overview.stats[PayoutState.PENDING] == {"count": 1, "amount_cents": 5000}
        assert overview.stats[PayoutState.COMPLETED] == {"count": 1, "amount_cents": 2500}
        assert overview.stats[PayoutState.FAILED] == {"count": 0, "amount_cents": 0}
        assert overview.stats["open_amount_cents"] == 5000

    def test_admin_overview_filter(self, pending_payout):
        PayoutFactory(state=PayoutState.COMPLETED)

        overview = PayoutService.admin_overview(status=PayoutState.PENDING)

        assert overview.payouts == [pending_payout]
