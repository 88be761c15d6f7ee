"""Installment model for loan repayment schedules."""

from datetime import datetime
import logging
from typing import List, Optional

from pydantic import Field

from .base import BaseRecordModel, Money
from .enums import RepaymentStatus
from .exceptions import ModelValidationError


logger = logging.getLogger(__name__)


class LoanRepaymentModel(BaseRecordModel):
    """One installment of an approved loan."""

    loan_id: str = Field(..., min_length=3)
    sequence_no: int = Field(default=1, gt=0)
    amount: Money = Field(..., ge=0)
    due_date: datetime = Field(...)
    status: RepaymentStatus = Field(default=RepaymentStatus.PENDING)
    paid_at: Optional[datetime] = Field(default=None)

    @property
    def is_pending(self) -> bool:
        """Return whether the installment is still open."""
        return self.status == RepaymentStatus.PENDING

    @classmethod
    def validate_schedule(cls, repayments: List["LoanRepaymentModel"], expected_count: int) -> None:
        """Validate count, sequence continuity, and due-date ordering of a schedule.

        Args:
            repayments: Installments for one loan in stored order.
            expected_count: Number of installments the loan term requires.

        Raises:
            ModelValidationError: If the schedule is incomplete or out of order.
        """
        if len(repayments) != expected_count:
            raise ModelValidationError(
                "Schedule has {0} installments, expected {1}".format(len(repayments), expected_count)
            )
        for index, repayment in enumerate(repayments, start=1):
            if repayment.sequence_no != index:
                raise ModelValidationError("Installment sequence numbers must be continuous from 1")
        for previous, current in zip(repayments, repayments[1:]):
            if current.due_date <= previous.due_date:
                raise ModelValidationError("Installment due dates must be strictly increasing")
