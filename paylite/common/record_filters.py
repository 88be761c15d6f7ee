"""Shared filters and aggregates over flat record lists."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from paylite.common.loan_math import money
from paylite.models.base import utc_now
from paylite.models.enums import LoanStatus, TransactionStatus
from paylite.models.loans import LoanModel
from paylite.models.repayments import LoanRepaymentModel
from paylite.models.transactions import TransactionModel


def for_user(records: Iterable, user_id: str) -> list:
    """Return records owned by `user_id`, preserving order."""
    return [record for record in records if record.user_id == user_id]


def find_by_id(records: Iterable, record_id: str):
    """Return the first record with `record_id`, or None."""
    for record in records:
        if record.id == record_id:
            return record
    return None


def successful(transactions: Iterable[TransactionModel]) -> List[TransactionModel]:
    """Return settled transactions."""
    return [item for item in transactions if item.status == TransactionStatus.SUCCESS]


def count_successful(transactions: Iterable[TransactionModel]) -> int:
    """Return the number of settled transactions."""
    return len(successful(transactions))


def sum_successful_amount(transactions: Iterable[TransactionModel]) -> float:
    """Return the settled transaction volume."""
    return money(sum(item.amount for item in successful(transactions)))


def approved(loans: Iterable[LoanModel]) -> List[LoanModel]:
    """Return approved loans."""
    return [loan for loan in loans if loan.status == LoanStatus.APPROVED]


def active(loans: Iterable[LoanModel]) -> List[LoanModel]:
    """Return approved loans with an open balance."""
    return [loan for loan in approved(loans) if loan.remaining_balance > 0]


def sum_principal(loans: Iterable[LoanModel]) -> float:
    return money(sum(loan.amount for loan in loans))


def sum_outstanding(loans: Iterable[LoanModel]) -> float:
    return money(sum(loan.remaining_balance for loan in loans))


def newest_first(records: Sequence, attribute: str = "created_at") -> list:
    """Sort records by a timestamp attribute, most recent first."""
    return sorted(records, key=lambda record: getattr(record, attribute), reverse=True)


def first_pending(repayments: Iterable[LoanRepaymentModel]) -> Optional[LoanRepaymentModel]:
    """Return the next installment due, in canonical schedule order."""
    for repayment in repayments:
        if repayment.is_pending:
            return repayment
    return None


def past_due(repayments: Iterable[LoanRepaymentModel], as_of: Optional[datetime] = None) -> List[LoanRepaymentModel]:
    """Return pending installments whose due date is before `as_of`.

    A naive `as_of` is taken to be UTC.
    """
    cutoff = as_of or utc_now()
    if cutoff.tzinfo is None:
        cutoff = cutoff.replace(tzinfo=timezone.utc)
    return [item for item in repayments if item.is_pending and item.due_date < cutoff]
