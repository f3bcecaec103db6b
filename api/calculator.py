from fastapi import APIRouter, Query

from schemas.application import Currency
from services.calculator import (
    CURRENCY_LABELS,
    CURRENCY_RATES,
    DEFAULT_AMOUNT,
    DEFAULT_CURRENCY,
    DEFAULT_TERM_MONTHS,
    MAX_AMOUNT,
    MAX_TERM_MONTHS,
    MIN_AMOUNT,
    MIN_TERM_MONTHS,
    compute_monthly_payment,
    format_money,
)

router = APIRouter(prefix="/api/calculator", tags=["calculator"])


@router.get("/quote")
async def quote(
    amount: int = Query(DEFAULT_AMOUNT, ge=MIN_AMOUNT, le=MAX_AMOUNT),
    duration: int = Query(DEFAULT_TERM_MONTHS, ge=MIN_TERM_MONTHS, le=MAX_TERM_MONTHS),
    currency: Currency = Query(DEFAULT_CURRENCY),
):
    result = compute_monthly_payment(amount, duration, currency)
    return {
        "amount": amount,
        "duration": duration,
        "currency": currency.value,
        "annualRate": CURRENCY_RATES[currency],
        "monthlyPayment": result.monthly_payment,
        "totalPayback": result.total_payback,
        "formatted": {
            "monthlyPayment": format_money(result.monthly_payment, currency),
            "totalPayback": format_money(result.total_payback, currency),
        },
    }


@router.get("/currencies")
async def list_currencies():
    return [
        {"code": c.value, "label": CURRENCY_LABELS[c], "annualRate": rate}
        for c, rate in CURRENCY_RATES.items()
    ]
