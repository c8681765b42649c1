"""
Money math for creator payments.

All amounts are integer cents. The platform keeps a flat 20% of every
payment; the creator's share is whatever is left, so fee and net always
add back up to the gross amount.

Usage:
    from monetization.money import platform_fee, net_amount, split_amount

    platform_fee(10000)   # 2000
    net_amount(10000)     # 8000
    split_amount(999)     # FeeSplit(gross_cents=999, fee_cents=199, net_cents=800)
"""

from __future__ import annotations

from dataclasses import dataclass

# Platform share of every payment, in percent. Not configurable per creator.
PLATFORM_FEE_PERCENT = 20

# Smallest payout a creator may request ($10.00)
MIN_PAYOUT_CENTS = 1000

DEFAULT_CURRENCY = "usd"


@dataclass(frozen=True)
class FeeSplit:
    """Gross amount broken into platform fee and creator net."""

    gross_cents: int
    fee_cents: int
    net_cents: int


def platform_fee(gross_cents: int) -> int:
    """
    Platform fee for a gross amount, rounded down to the cent.

    Raises:
        ValueError: If gross_cents is negative
    """
    if gross_cents < 0:
        raise ValueError(f"Gross amount cannot be negative: {gross_cents}")
    return gross_cents * PLATFORM_FEE_PERCENT // 100


def net_amount(gross_cents: int) -> int:
    """Creator's share of a gross amount."""
    return gross_cents - platform_fee(gross_cents)


def split_amount(gross_cents: int) -> FeeSplit:
    fee = platform_fee(gross_cents)
    return FeeSplit(gross_cents=gross_cents, fee_cents=fee, net_cents=gross_cents - fee)


def format_cents(amount_cents: int, currency: str = DEFAULT_CURRENCY) -> str:
    """Format cents for logs and admin screens, e.g. '$80.00 USD'."""
    return f"${amount_cents / 100:,.2f} {currency.upper()}"
