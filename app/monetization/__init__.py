"""
Monetization - ledger, entitlements and payment reconciliation.

Decides whether a user may view paid content, records money movement in an
append-only ledger and folds asynchronous provider webhooks into
consistent transaction, subscription and entitlement state.

Sub-packages:
    ledger          - LedgerEntry model and LedgerService (append/summarize)
    models          - PaymentTransaction, Subscription, Entitlement, Payout,
                      WebhookEvent
    services        - Subscription, access, payout, checkout and
                      reconciliation services
    webhooks        - Normalized PaymentEvent, handler registry, endpoint
    adapters        - CCBill signature checks, parsing and payment links
    state_machines  - TextChoices enums for every status column

Note:
    Models are NOT imported here to avoid AppRegistryNotReady errors.
    Import them from monetization.models / monetization.ledger.models.
"""
