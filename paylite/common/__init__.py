"""Common reusable utility exports."""

from .invoice import build_invoice_data, render_invoice_json
from .loan_math import (
    INTEREST_RATE,
    MAX_LOAN_AMOUNT,
    MAX_TERM_MONTHS,
    MIN_LOAN_AMOUNT,
    MIN_SUCCESSFUL_PAYMENTS,
    MIN_TERM_MONTHS,
    add_months,
    amortized_emi,
    apply_repayment,
    build_due_dates,
    compute_emi,
    compute_total_amount,
)
from .weighted_choice import weighted_draw

__all__ = [
    "INTEREST_RATE",
    "MAX_LOAN_AMOUNT",
    "MAX_TERM_MONTHS",
    "MIN_LOAN_AMOUNT",
    "MIN_SUCCESSFUL_PAYMENTS",
    "MIN_TERM_MONTHS",
    "add_months",
    "amortized_emi",
    "apply_repayment",
    "build_due_dates",
    "build_invoice_data",
    "compute_emi",
    "compute_total_amount",
    "render_invoice_json",
    "weighted_draw",
]
