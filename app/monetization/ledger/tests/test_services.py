"""
Tests for LedgerService.

Covers fee splitting, sign rules, idempotent appends, reversals and the
derived earnings summary.
"""

import uuid

import pytest

from authentication.tests.factories import CreatorFactory
from monetization.ledger.exceptions import InvalidLedgerAmount
from monetization.ledger.models import LedgerEntry
from monetization.ledger.services import LedgerService
from monetization.state_machines import LedgerEntryType


@pytest.fixture
def ledger_creator(db):
    return CreatorFactory()


@pytest.mark.django_db
class TestAppend:
    def test_earnings_split_fee_and_net(self, ledger_creator):
        entry = LedgerService.append(ledger_creator.pk, 10000, LedgerEntryType.EARNINGS)

        assert entry.gross_cents == 10000
        assert entry.platform_fee_cents == 2000
        assert entry.net_cents == 8000

    def test_earnings_rounding_favours_creator(self, ledger_creator):
        entry = LedgerService.append(ledger_creator.pk, 999, LedgerEntryType.EARNINGS)

        assert entry.platform_fee_cents == 199
        assert entry.net_cents == 800

    def test_payout_is_negative_without_fee(self, ledger_creator):
        entry = LedgerService.append(ledger_creator.pk, -5000, LedgerEntryType.PAYOUT)

        assert entry.gross_cents == -5000
        assert entry.platform_fee_cents == 0
        assert entry.net_cents == -5000

    @pytest.mark.parametrize(
        "entry_type, amount",
        [
            (LedgerEntryType.EARNINGS, -1),
            (LedgerEntryType.PAYOUT, 5000),
            (LedgerEntryType.REFUND, 0),
            ("bonus", 100),
        ],
    )
    def test_invalid_amounts_rejected(self, ledger_creator, entry_type, amount):
        with pytest.raises(InvalidLedgerAmount):
            LedgerService.append(ledger_creator.pk, amount, entry_type)

        assert LedgerEntry.objects.count() == 0

    def test_adjustment_accepts_any_sign(self, ledger_creator):
        LedgerService.append(ledger_creator.pk, -250, LedgerEntryType.ADJUSTMENT)
        LedgerService.append(ledger_creator.pk, 400, LedgerEntryType.ADJUSTMENT)

        assert LedgerService.get_balance(ledger_creator.pk) == 150

    def test_replay_with_same_key_returns_first_row(self, ledger_creator):
        first = LedgerService.append(
            ledger_creator.pk, 10000, LedgerEntryType.EARNINGS, idempotency_key="earnings:t1"
        )
        second = LedgerService.append(
            ledger_creator.pk, 10000, LedgerEntryType.EARNINGS, idempotency_key="earnings:t1"
        )

        assert first.pk == second.pk
        assert LedgerEntry.objects.count() == 1

    def test_missing_key_is_generated(self, ledger_creator):
        a = LedgerService.append(ledger_creator.pk, 100, LedgerEntryType.EARNINGS)
        b = LedgerService.append(ledger_creator.pk, 100, LedgerEntryType.EARNINGS)

        assert a.idempotency_key != b.idempotency_key
        assert a.idempotency_key.startswith("earnings:")


@pytest.mark.django_db
class TestReversal:
    def test_reversal_negates_every_column(self, ledger_creator):
        earnings = LedgerService.append(ledger_creator.pk, 10000, LedgerEntryType.EARNINGS)

        reversal = LedgerService.append_reversal(earnings)

        assert reversal.entry_type == LedgerEntryType.REFUND
        assert reversal.gross_cents == -10000
        assert reversal.platform_fee_cents == -2000
        assert reversal.net_cents == -8000
        assert reversal.idempotency_key == f"reversal:{earnings.pk}"

    def test_reversal_is_idempotent(self, ledger_creator):
        earnings = LedgerService.append(ledger_creator.pk, 10000, LedgerEntryType.EARNINGS)

        LedgerService.append_reversal(earnings)
        LedgerService.append_reversal(earnings)

        assert LedgerService.get_balance(ledger_creator.pk) == 0
        assert LedgerEntry.objects.filter(entry_type=LedgerEntryType.REFUND).count() == 1


@pytest.mark.django_db
class TestSummarize:
    def test_earnings_then_payout(self, ledger_creator):
        LedgerService.append(ledger_creator.pk, 10000, LedgerEntryType.EARNINGS)
        LedgerService.append(ledger_creator.pk, -5000, LedgerEntryType.PAYOUT)

        summary = LedgerService.summarize(ledger_creator.pk)

        assert summary.total_gross_cents == 10000
        assert summary.total_fees_cents == 2000
        assert summary.total_earnings_cents == 8000
        assert summary.total_payouts_cents == 5000
        assert summary.pending_balance_cents == 3000
        assert summary.entry_count == 2

    def test_refund_reduces_earnings(self, ledger_creator):
        earnings = LedgerService.append(ledger_creator.pk, 10000, LedgerEntryType.EARNINGS)
        LedgerService.append_reversal(earnings)

        summary = LedgerService.summarize(ledger_creator.pk)

        assert summary.total_earnings_cents == 0
        assert summary.total_refunds_cents == 8000
        assert summary.pending_balance_cents == 0

    def test_balance_equals_sum_of_net(self, ledger_creator):
        for gross in (999, 1500, 10000):
            LedgerService.append(ledger_creator.pk, gross, LedgerEntryType.EARNINGS)
        LedgerService.append(ledger_creator.pk, -2000, LedgerEntryType.PAYOUT)

        rows = LedgerEntry.objects.for_creator(ledger_creator.pk)

        assert LedgerService.get_balance(ledger_creator.pk) == sum(r.net_cents for r in rows)

    def test_empty_ledger(self, ledger_creator):
        summary = LedgerService.summarize(ledger_creator.pk)

        assert summary.pending_balance_cents == 0
        assert summary.as_dict()["entry_count"] == 0


@pytest.mark.django_db
class TestListEntries:
    def test_newest_first_and_clamped(self, ledger_creator):
        for gross in (100, 200, 300):
            LedgerService.append(ledger_creator.pk, gross, LedgerEntryType.EARNINGS)

        entries = list(LedgerService.list_entries(ledger_creator.pk, limit=2))

        assert [e.gross_cents for e in entries] == [300, 200]

    def test_offset(self, ledger_creator):
        for gross in (100, 200, 300):
            LedgerService.append(ledger_creator.pk, gross, LedgerEntryType.EARNINGS)

        entries = list(LedgerService.list_entries(ledger_creator.pk, limit=50, offset=2))

        assert [e.gross_cents for e in entries] == [100]

    def test_other_creators_rows_hidden(self, ledger_creator):
        LedgerService.append(CreatorFactory().pk, 100, LedgerEntryType.EARNINGS)

        assert list(LedgerService.list_entries(ledger_creator.pk)) == []

    def test_transaction_link(self, ledger_creator):
        entry = LedgerService.append(
            ledger_creator.pk,
            100,
            LedgerEntryType.ADJUSTMENT,
            description="Goodwill credit",
            idempotency_key=f"adjustment:{uuid.uuid4()}",
        )

        assert entry.transaction_id is None
        assert entry.description == "Goodwill credit"
