"""
Django admin configuration for the creator ledger.

Ledger entries are append-only: the admin can browse and search them
but never add, edit or delete one. Corrections are made by appending an
adjustment entry through LedgerService.
"""

from django.contrib import admin

from monetization.money import format_cents

from .models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "creator",
        "entry_type",
        "gross_display",
        "fee_display",
        "net_display",
        "description",
        "created_at",
    ]
    list_filter = ["entry_type", "created_at"]
    search_fields = ["id", "creator__email", "idempotency_key", "transaction__provider_transaction_id"]
    raw_id_fields = ["creator", "transaction"]
    ordering = ["-created_at"]

    def gross_display(self, obj: LedgerEntry) -> str:
        return format_cents(obj.gross_cents)

    gross_display.short_description = "Gross"

    def fee_display(self, obj: LedgerEntry) -> str:
        return format_cents(obj.platform_fee_cents)

    fee_display.short_description = "Fee"

    def net_display(self, obj: LedgerEntry) -> str:
        return format_cents(obj.net_cents)

    net_display.short_description = "Net"

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
