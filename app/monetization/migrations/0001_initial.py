import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


def _id():
    return ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False))


def _created_at():
    return ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"))


def _updated_at():
    return ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"))


def _version():
    return ("version", models.PositiveIntegerField(default=1, help_text="Incremented on each update of this row"))


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("authentication", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Subscription",
            fields=[
                _id(),
                _version(),
                _created_at(),
                _updated_at(),
                ("tier_name", models.CharField(default="default", max_length=50)),
                ("price_cents", models.PositiveIntegerField(help_text="Price per period in cents")),
                (
                    "state",
                    django_fsm.FSMField(
                        choices=[("pending", "Pending"), ("active", "Active"), ("canceled", "Canceled"), ("expired", "Expired")],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the subscription (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("canceled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, null=True)),
                ("auto_renew", models.BooleanField(default=True)),
                ("creator", models.ForeignKey(help_text="Creator being subscribed to", on_delete=django.db.models.deletion.PROTECT, related_name="subscribers", to=settings.AUTH_USER_MODEL)),
                ("fan", models.ForeignKey(help_text="User paying for the subscription", on_delete=django.db.models.deletion.PROTECT, related_name="subscriptions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Subscription",
                "verbose_name_plural": "Subscriptions",
                "db_table": "monetization_subscription",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["fan", "state"], name="sub_fan_state_idx"),
                    models.Index(fields=["creator", "state"], name="sub_creator_state_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("state", "active")), fields=("fan", "creator"), name="one_active_subscription_per_pair"),
                    models.CheckConstraint(condition=models.Q(("fan", models.F("creator")), _negated=True), name="subscription_fan_not_creator"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                _id(),
                _created_at(),
                _updated_at(),
                ("content_id", models.UUIDField(blank=True, db_index=True, help_text="Post or stream unlocked by a pay-per-view charge", null=True)),
                ("gross_amount_cents", models.PositiveBigIntegerField(help_text="Amount charged in cents")),
                ("currency", models.CharField(default="usd", help_text="ISO 4217 currency code (lowercase)", max_length=3)),
                ("transaction_type", models.CharField(choices=[("subscription", "Subscription"), ("ppv", "Pay-per-view"), ("tip", "Tip")], db_index=True, max_length=20)),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed"), ("refunded", "Refunded")],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the transaction (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("provider", models.CharField(default="ccbill", max_length=30)),
                ("provider_transaction_id", models.CharField(help_text="Provider transaction id - unique constraint for idempotency", max_length=255, unique=True)),
                ("failure_reason", models.TextField(blank=True, null=True)),
                ("refund_metadata", models.JSONField(blank=True, default=dict)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict, help_text="Arbitrary JSON metadata for extensibility")),
                ("creator", models.ForeignKey(blank=True, help_text="Creator being paid", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payments_received", to=settings.AUTH_USER_MODEL)),
                ("payer", models.ForeignKey(help_text="Fan who paid", on_delete=django.db.models.deletion.PROTECT, related_name="payments_made", to=settings.AUTH_USER_MODEL)),
                ("subscription", models.ForeignKey(blank=True, help_text="Subscription this charge paid for", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="transactions", to="monetization.subscription")),
            ],
            options={
                "verbose_name": "Transaction",
                "verbose_name_plural": "Transactions",
                "db_table": "monetization_transaction",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["payer", "status"], name="txn_payer_status_idx"),
                    models.Index(fields=["creator", "status"], name="txn_creator_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                _id(),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this entry was recorded")),
                ("entry_type", models.CharField(choices=[("earnings", "Earnings"), ("payout", "Payout"), ("refund", "Refund"), ("adjustment", "Adjustment")], help_text="Category of this entry", max_length=20)),
                ("gross_cents", models.BigIntegerField(help_text="Signed gross amount in cents")),
                ("platform_fee_cents", models.BigIntegerField(default=0, help_text="Signed platform fee in cents")),
                ("net_cents", models.BigIntegerField(help_text="Signed creator share in cents")),
                ("description", models.TextField(blank=True, help_text="Human-readable description of this entry", null=True)),
                ("idempotency_key", models.CharField(help_text="Unique key to prevent duplicate entries", max_length=255, unique=True)),
                ("creator", models.ForeignKey(help_text="Creator whose balance this entry moves", on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to=settings.AUTH_USER_MODEL)),
                ("transaction", models.ForeignKey(blank=True, help_text="Payment transaction behind this entry", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="monetization.paymenttransaction")),
            ],
            options={
                "verbose_name_plural": "Ledger entries",
                "db_table": "monetization_ledger_entry",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["creator", "-created_at"], name="ledger_creator_created_idx"),
                    models.Index(fields=["creator", "entry_type"], name="ledger_creator_type_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("entry_type", "earnings"), _negated=True),
                            ("net_cents", models.F("gross_cents") - models.F("platform_fee_cents")),
                            _connector="OR",
                        ),
                        name="ledger_earnings_net_is_gross_minus_fee",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Entitlement",
            fields=[
                _id(),
                ("content_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("entitlement_type", models.CharField(choices=[("subscription", "Subscription"), ("ppv_purchase", "Pay-per-view purchase"), ("tip", "Tip"), ("free", "Free grant")], max_length=20)),
                ("granted_at", models.DateTimeField(auto_now_add=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("creator", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("subscription", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="entitlements", to="monetization.subscription")),
                ("transaction", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="entitlements", to="monetization.paymenttransaction")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="entitlements", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "monetization_entitlement",
                "ordering": ["-granted_at"],
                "indexes": [
                    models.Index(fields=["user", "content_id"], name="entitlement_user_content_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "content_id", "entitlement_type"), name="unique_entitlement_per_user_content_type"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payout",
            fields=[
                _id(),
                _version(),
                _created_at(),
                _updated_at(),
                ("amount_cents", models.PositiveBigIntegerField(help_text="Payout amount in cents")),
                ("method", models.CharField(choices=[("bank_transfer", "Bank transfer"), ("paxum", "Paxum"), ("skrill", "Skrill"), ("crypto", "Crypto"), ("other", "Other")], default="bank_transfer", max_length=20)),
                ("method_details", models.JSONField(blank=True, default=dict)),
                (
                    "state",
                    django_fsm.FSMField(
                        choices=[("pending", "Pending"), ("processing", "Processing"), ("completed", "Completed"), ("failed", "Failed"), ("cancelled", "Cancelled")],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the payout (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("admin_notes", models.TextField(blank=True, null=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("failure_reason", models.TextField(blank=True, null=True)),
                ("creator", models.ForeignKey(help_text="Creator receiving the payout", on_delete=django.db.models.deletion.PROTECT, related_name="payouts", to=settings.AUTH_USER_MODEL)),
                ("ledger_entry", models.OneToOneField(blank=True, help_text="Payout ledger entry written on completion", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payout", to="monetization.ledgerentry")),
                ("processed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Payout",
                "verbose_name_plural": "Payouts",
                "db_table": "monetization_payout",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["creator", "state"], name="payout_creator_state_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="payout_amount_positive"),
                    models.UniqueConstraint(condition=models.Q(("state__in", ("pending", "processing"))), fields=("creator",), name="one_open_payout_per_creator"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WebhookEvent",
            fields=[
                _id(),
                _created_at(),
                _updated_at(),
                ("provider", models.CharField(default="ccbill", max_length=30)),
                ("event_key", models.CharField(help_text="Unique per provider event - constraint for idempotency", max_length=255, unique=True)),
                ("event_type", models.CharField(db_index=True, max_length=100)),
                ("provider_transaction_id", models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ("payload", models.JSONField(help_text="Decoded webhook body")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("processing", "Processing"), ("processed", "Processed"), ("failed", "Failed")], db_index=True, default="pending", max_length=20)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("retry_count", models.PositiveSmallIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Webhook Event",
                "verbose_name_plural": "Webhook Events",
                "db_table": "monetization_webhook_event",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "retry_count"], name="webhook_status_retry_idx"),
                    models.Index(fields=["status", "updated_at"], name="webhook_status_updated_idx"),
                ],
            },
        ),
    ]
