"""Loan pricing and schedule math.

Loans are priced on a flat simple-interest model:

    total_amount = principal + principal * (rate% / 100) * (term_months / 12)
    emi          = round_half_up(total_amount / term_months)

This is not a reducing-balance amortization. It understates the effective
cost relative to a compounding loan, in exchange for a single integer EMI
that is the same for every month. `amortized_emi` implements the reducing
balance formula for comparison only; nothing prices a loan with it.

Example:  principal=20000, term=12, rate=12  ->  total=22400, emi=1867
"""

from __future__ import annotations

import calendar
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union

# ---------------------------------------------------------------------------
# Product parameters
# ---------------------------------------------------------------------------
INTEREST_RATE: int = 12              # percent per annum, fixed
MIN_SUCCESSFUL_PAYMENTS: int = 3     # successful payments needed for auto-approval
MIN_LOAN_AMOUNT: int = 10000
MAX_LOAN_AMOUNT: int = 50000
MIN_TERM_MONTHS: int = 6
MAX_TERM_MONTHS: int = 60

Number = Union[int, float, Decimal]

_CENT = Decimal("0.01")


def _dec(value: Number) -> Decimal:
    """Convert a numeric value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(_dec(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def money(value: Number) -> float:
    """Round a currency amount to two decimals, halves up."""
    return float(_dec(value).quantize(_CENT, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

def compute_total_amount(principal: Number, annual_rate_percent: Number, term_months: int) -> float:
    """Return principal plus flat simple interest over the term."""
    if term_months <= 0:
        raise ValueError("term_months must be > 0")
    p = _dec(principal)
    interest = p * (_dec(annual_rate_percent) / Decimal("100")) * (Decimal(int(term_months)) / Decimal("12"))
    return money(p + interest)


def compute_emi(principal: Number, annual_rate_percent: Number, term_months: int) -> int:
    """Return the flat-rate EMI, rounded to a whole currency unit."""
    total = compute_total_amount(principal, annual_rate_percent, term_months)
    return round_half_up(_dec(total) / Decimal(int(term_months)))


def amortized_emi(principal: Number, annual_rate_percent: Number, term_months: int) -> int:
    """Return the reducing-balance EMI with monthly compounding.

    P * r * (1 + r)^n / ((1 + r)^n - 1), r = monthly rate. Reference only.
    """
    if term_months <= 0:
        raise ValueError("term_months must be > 0")
    p = float(principal)
    monthly_rate = float(annual_rate_percent) / 100 / 12
    if monthly_rate == 0:
        return round_half_up(p / term_months)
    growth = (1 + monthly_rate) ** term_months
    return round_half_up(p * monthly_rate * growth / (growth - 1))


def total_interest(principal: Number, annual_rate_percent: Number, term_months: int) -> float:
    """Return the interest portion of the flat-rate total."""
    return money(_dec(compute_total_amount(principal, annual_rate_percent, term_months)) - _dec(principal))


def apply_repayment(balance: Number, amount: Number) -> float:
    """Decrement `balance` by `amount`, floored at zero."""
    return money(max(Decimal("0"), _dec(balance) - _dec(amount)))


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

def add_months(start: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length.

    Example:  2024-01-31 + 1 month  ->  2024-02-29
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def build_due_dates(start: datetime, term_months: int) -> List[datetime]:
    """Return `term_months` due dates, the i-th (0-based) at start + (i + 1) months."""
    return [add_months(start, offset + 1) for offset in range(term_months)]
