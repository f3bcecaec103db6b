"""
Amortizing loan payment calculator.

M = P * i * (1+i)^n / ((1+i)^n - 1), with i = annual_rate / 12 and n = term in months.
Evaluated as P * i / (1 - (1+i)^-n) so very long terms underflow instead of overflowing.
Rates are fixed per currency; callers are responsible for keeping principal and
term inside the input-control ranges below.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from schemas.application import Currency
from schemas.calculator import PaymentQuote

# Nominal annual interest rate per currency
CURRENCY_RATES: dict[Currency, float] = {
    Currency.EUR: 0.045,
    Currency.USD: 0.052,
    Currency.GBP: 0.048,
    Currency.CHF: 0.035,
    Currency.JPY: 0.025,
}

CURRENCY_LABELS: dict[Currency, str] = {
    Currency.EUR: "Euro (EUR)",
    Currency.USD: "US Dollar (USD)",
    Currency.GBP: "British Pound (GBP)",
    Currency.CHF: "Swiss Franc (CHF)",
    Currency.JPY: "Japanese Yen (JPY)",
}

_SYMBOLS: dict[Currency, str] = {
    Currency.EUR: "€",
    Currency.USD: "$",
    Currency.GBP: "£",
    Currency.CHF: "CHF ",
    Currency.JPY: "¥",
}

MIN_AMOUNT = 1_000
MAX_AMOUNT = 100_000
AMOUNT_STEP = 500
DEFAULT_AMOUNT = 10_000

MIN_TERM_MONTHS = 6
MAX_TERM_MONTHS = 60
DEFAULT_TERM_MONTHS = 24

DEFAULT_CURRENCY = Currency.EUR


def compute_monthly_payment(
    principal: float,
    term_months: int,
    currency: Currency | str,
    annual_rate: Optional[float] = None,
) -> PaymentQuote:
    """
    Monthly payment and total payback for a fully amortizing loan.
    `annual_rate` overrides the currency's table rate.
    """
    if annual_rate is None:
        annual_rate = CURRENCY_RATES[Currency(currency)]
    i = annual_rate / 12
    n = term_months
    if i == 0:
        monthly = principal / n
    else:
        monthly = principal * i / (1 - (1 + i) ** -n)
    return PaymentQuote(monthly_payment=monthly, total_payback=monthly * n)


def clamp_amount(amount: float) -> int:
    """Snap to the slider: nearest 500 (ties upward) within [1,000, 100,000]."""
    snapped = MIN_AMOUNT + math.floor((amount - MIN_AMOUNT) / AMOUNT_STEP + 0.5) * AMOUNT_STEP
    return int(min(max(snapped, MIN_AMOUNT), MAX_AMOUNT))


def clamp_term(term_months: float) -> int:
    return int(min(max(math.floor(term_months + 0.5), MIN_TERM_MONTHS), MAX_TERM_MONTHS))


def format_money(value: float, currency: Currency | str) -> str:
    """en-US currency display without fraction digits, e.g. '€10,000'."""
    symbol = _SYMBOLS[Currency(currency)]
    rounded = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,}"
