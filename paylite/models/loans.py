"""Loan application and loan agreement models."""

from datetime import datetime
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .base import BaseRecordModel, Money, utc_now
from .enums import LoanStatus
from .repayments import LoanRepaymentModel


logger = logging.getLogger(__name__)


class LoanApplicationModel(BaseModel):
    """Caller-supplied loan request. Range checks live in the loan service."""

    amount: Money = Field(..., gt=0)
    term_months: int = Field(..., gt=0)
    purpose: str = Field(..., min_length=1)

    model_config = ConfigDict(str_strip_whitespace=True)


class LoanModel(BaseRecordModel):
    """Represents a micro-loan with its repayment schedule."""

    user_id: str = Field(..., min_length=3)
    amount: Money = Field(..., gt=0, description="Principal.")
    purpose: str = Field(default="")
    status: LoanStatus = Field(default=LoanStatus.PENDING)
    interest_rate: float = Field(..., ge=0)
    term_months: int = Field(..., gt=0)
    emi_amount: int = Field(..., ge=0)
    total_amount: Money = Field(..., ge=0)
    remaining_balance: Money = Field(default=0, ge=0)
    applied_at: datetime = Field(default_factory=utc_now)
    approved_at: Optional[datetime] = Field(default=None)
    repayments: List[LoanRepaymentModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_balance_rules(self) -> "LoanModel":
        """Validate balance and schedule rules across the whole record."""
        try:
            if self.status != LoanStatus.APPROVED:
                if self.remaining_balance != 0:
                    raise ValueError("non-approved loan must have remaining_balance == 0")
                if self.repayments:
                    raise ValueError("non-approved loan cannot carry repayments")
                return self

            for repayment in self.repayments:
                if repayment.loan_id != self.id:
                    raise ValueError("repayment {0} belongs to another loan".format(repayment.id))

            # Legacy flat-model loans accumulate repayments after the fact and
            # may carry none while a balance is open.
            if self.repayments and any(item.is_pending for item in self.repayments):
                if self.remaining_balance == 0:
                    raise ValueError("remaining_balance is 0 while installments are pending")
            elif self.repayments and self.remaining_balance != 0 and len(self.repayments) >= self.term_months:
                raise ValueError("all installments paid but remaining_balance is not 0")
            return self
        except ValueError:
            logger.exception("Loan validation failed loan_id=%s user_id=%s", self.id, self.user_id)
            raise

    @property
    def is_approved(self) -> bool:
        """Return whether the loan is approved."""
        return self.status == LoanStatus.APPROVED

    @property
    def is_active(self) -> bool:
        """Return whether the loan still has an outstanding balance."""
        return self.is_approved and self.remaining_balance > 0

    @property
    def has_schedule(self) -> bool:
        """Return whether the loan uses itemized installments."""
        return bool(self.repayments) and len(self.repayments) == self.term_months

    def find_repayment(self, repayment_id: str) -> Optional[LoanRepaymentModel]:
        """Return the installment with `repayment_id`, if any."""
        for repayment in self.repayments:
            if repayment.id == repayment_id:
                return repayment
        return None
