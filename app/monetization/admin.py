"""
Monetization admin configuration.

This file imports the ledger admin and registers the payment domain
models with the Django admin. Status columns are driven by django-fsm
transitions and are read-only here; payouts are approved through the
payout API so the ledger entry is written with the state change.
"""

from django.contrib import admin

from monetization.ledger.admin import LedgerEntryAdmin
from monetization.models import (
    Entitlement,
    PaymentTransaction,
    Payout,
    Subscription,
    WebhookEvent,
)
from monetization.money import format_cents
from monetization.state_machines import WebhookEventStatus

__all__ = [
    "EntitlementAdmin",
    "LedgerEntryAdmin",
    "PaymentTransactionAdmin",
    "PayoutAdmin",
    "SubscriptionAdmin",
    "WebhookEventAdmin",
]


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "transaction_type",
        "status",
        "amount_display",
        "payer",
        "creator",
        "provider",
        "provider_transaction_id",
        "created_at",
    ]
    list_filter = ["status", "transaction_type", "provider"]
    search_fields = ["id", "provider_transaction_id", "payer__email", "creator__email"]
    raw_id_fields = ["payer", "creator", "subscription"]
    readonly_fields = [
        "id",
        "status",
        "completed_at",
        "failed_at",
        "refunded_at",
        "refund_metadata",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def amount_display(self, obj: PaymentTransaction) -> str:
        return format_cents(obj.gross_amount_cents, obj.currency)

    amount_display.short_description = "Amount"

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ["id", "fan", "creator", "state", "price_cents", "auto_renew", "expires_at"]
    list_filter = ["state", "auto_renew"]
    search_fields = ["id", "fan__email", "creator__email"]
    raw_id_fields = ["fan", "creator"]
    readonly_fields = ["id", "state", "started_at", "canceled_at", "version", "created_at", "updated_at"]
    ordering = ["-created_at"]


@admin.register(Entitlement)
class EntitlementAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "entitlement_type", "content_id", "creator", "granted_at", "expires_at"]
    list_filter = ["entitlement_type"]
    search_fields = ["id", "user__email", "content_id"]
    raw_id_fields = ["user", "creator", "subscription", "transaction"]
    ordering = ["-granted_at"]

    def has_change_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ["id", "creator", "amount_display", "method", "state", "processed_by", "created_at"]
    list_filter = ["state", "method"]
    search_fields = ["id", "creator__email"]
    raw_id_fields = ["creator", "processed_by", "ledger_entry"]
    readonly_fields = [
        "id",
        "state",
        "processed_by",
        "processed_at",
        "ledger_entry",
        "version",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def amount_display(self, obj: Payout) -> str:
        return format_cents(obj.amount_cents)

    amount_display.short_description = "Amount"

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display = ["event_key", "event_type", "status", "retry_count", "processed_at", "created_at"]
    list_filter = ["status", "event_type", "provider"]
    search_fields = ["event_key", "provider_transaction_id"]
    readonly_fields = [
        "id",
        "provider",
        "event_key",
        "event_type",
        "provider_transaction_id",
        "payload",
        "status",
        "processed_at",
        "error_message",
        "retry_count",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]
    actions = ["requeue"]

    @admin.action(description="Re-queue selected events for processing")
    def requeue(self, request, queryset):
        from monetization.tasks import process_webhook_event

        count = 0
        for webhook_event in queryset.exclude(status=WebhookEventStatus.PROCESSED):
            process_webhook_event.delay(str(webhook_event.id))
            count += 1
        self.message_user(request, f"Queued {count} webhook events.")

    def has_add_permission(self, request) -> bool:
        return False
