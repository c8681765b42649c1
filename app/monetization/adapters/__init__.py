"""
Payment provider adapters.

All provider-specific parsing, signing and verification lives here; the
reconciler only sees the normalized PaymentEvent.

Usage:
    from monetization.adapters import CCBillAdapter

    adapter = CCBillAdapter.from_settings()
    if adapter.verify_signature(request.body, signature):
        event = adapter.parse_event(adapter.decode_payload(request.body, content_type))
"""

from monetization.adapters.ccbill_adapter import CCBillAdapter, CCBillConfig, PaymentLinkParams

__all__ = [
    "CCBillAdapter",
    "CCBillConfig",
    "PaymentLinkParams",
]
