"""Micro-loan origination, schedule generation, and repayment."""

from __future__ import annotations

from datetime import datetime
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from paylite.common import loan_math, record_filters
from paylite.core.config import AppSettings
from paylite.models.base import new_record_id, utc_now
from paylite.models.enums import LoanStatus, RepaymentStatus
from paylite.models.exceptions import AlreadySettledError, ModelNotFoundError, ModelValidationError
from paylite.models.loans import LoanApplicationModel, LoanModel
from paylite.models.repayments import LoanRepaymentModel
from paylite.models.repositories import RecordStore


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class LoanService:
    """Loan engine: eligibility, EMI pricing, schedules, and repayments."""

    def __init__(
        self,
        settings: AppSettings,
        store: RecordStore,
        clock: Optional[Clock] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize loan dependencies."""
        self._settings = settings
        self._store = store
        self._clock = clock or utc_now
        self._sleep = sleep

    @property
    def interest_rate(self) -> float:
        """Return the fixed annual interest rate in percent."""
        return self._settings.loan_interest_rate

    def _validate_terms(self, amount: float, term_months: int) -> None:
        """Check principal and term against the configured product limits."""
        settings = self._settings
        if amount < settings.loan_min_amount or amount > settings.loan_max_amount:
            raise ModelValidationError(
                "Loan amount must be between {0:,.0f} and {1:,.0f}".format(settings.loan_min_amount, settings.loan_max_amount)
            )
        if term_months < settings.loan_min_term_months or term_months > settings.loan_max_term_months:
            raise ModelValidationError(
                "Loan term must be between {0} and {1} months".format(
                    settings.loan_min_term_months, settings.loan_max_term_months
                )
            )
        if settings.loan_term_options and term_months not in settings.loan_term_options:
            raise ModelValidationError(
                "Loan term must be one of: {0}".format(", ".join(str(item) for item in settings.loan_term_options))
            )

    def _load_loan(self, loan_id: str) -> LoanModel:
        loan = record_filters.find_by_id(self._store.get_loans(), loan_id)
        if loan is None:
            raise ModelNotFoundError("Loan not found: {0}".format(loan_id))
        return loan

    def check_eligibility(self, user_id: str) -> Dict[str, Any]:
        """Return the auto-approval decision inputs for a user."""
        transactions = record_filters.for_user(self._store.get_transactions(), user_id)
        successful_payments = record_filters.count_successful(transactions)
        required = self._settings.loan_min_successful_payments
        return {
            "user_id": user_id,
            "successful_payments": successful_payments,
            "required_successful_payments": required,
            "eligible": successful_payments >= required,
        }

    def quote_emi(self, amount: float, term_months: int) -> Dict[str, Any]:
        """Price a prospective loan without storing anything."""
        self._validate_terms(float(amount), int(term_months))
        total_amount = loan_math.compute_total_amount(amount, self.interest_rate, term_months)
        return {
            "amount": float(amount),
            "term_months": int(term_months),
            "interest_rate": self.interest_rate,
            "total_amount": total_amount,
            "total_interest": loan_math.total_interest(amount, self.interest_rate, term_months),
            "emi_amount": loan_math.compute_emi(amount, self.interest_rate, term_months),
        }

    def generate_repayment_schedule(self, loan: LoanModel) -> List[LoanRepaymentModel]:
        """Build one pending installment per month of the loan term.

        Installment i (0-based) falls due on start + (i + 1) months, where start
        is the approval time, or the application time when there is none.
        """
        start = loan.approved_at or loan.applied_at
        schedule = [
            LoanRepaymentModel(
                id=new_record_id("repay"),
                loan_id=loan.id,
                sequence_no=sequence_no,
                amount=loan.emi_amount,
                due_date=due_date,
                status=RepaymentStatus.PENDING,
            )
            for sequence_no, due_date in enumerate(loan_math.build_due_dates(start, loan.term_months), start=1)
        ]
        LoanRepaymentModel.validate_schedule(schedule, expected_count=loan.term_months)
        return schedule

    def apply_for_loan(self, user_id: str, application: LoanApplicationModel | Dict[str, Any]) -> LoanModel:
        """Price, decide, and persist a loan application.

        Users with enough successful payments are approved on the spot and get
        a full repayment schedule. Everyone else gets the configured ineligible
        status with a zero balance.

        Raises:
            ModelValidationError: If amount, term, or purpose is invalid. Nothing is stored.
            StorageError: If the loan cannot be persisted.
        """
        try:
            request = (
                application
                if isinstance(application, LoanApplicationModel)
                else LoanApplicationModel.model_validate(application)
            )
        except ValidationError as exc:
            raise ModelValidationError(str(exc))
        self._validate_terms(request.amount, request.term_months)

        logger.info("Processing loan application user_id=%s amount=%s term=%s", user_id, request.amount, request.term_months)
        if self._settings.loan_processing_delay_sec > 0:
            self._sleep(self._settings.loan_processing_delay_sec)

        eligibility = self.check_eligibility(user_id)
        now = self._clock()
        total_amount = loan_math.compute_total_amount(request.amount, self.interest_rate, request.term_months)
        emi_amount = loan_math.compute_emi(request.amount, self.interest_rate, request.term_months)

        try:
            loan = LoanModel(
                id=new_record_id("loan"),
                user_id=user_id,
                amount=request.amount,
                purpose=request.purpose,
                status=LoanStatus.APPROVED if eligibility["eligible"] else LoanStatus(self._settings.loan_ineligible_status),
                interest_rate=self.interest_rate,
                term_months=request.term_months,
                emi_amount=emi_amount,
                total_amount=total_amount,
                remaining_balance=total_amount if eligibility["eligible"] else 0,
                applied_at=now,
                approved_at=now if eligibility["eligible"] else None,
            )
        except ValidationError as exc:
            raise ModelValidationError(str(exc))

        if loan.is_approved:
            loan = loan.with_changes(repayments=self.generate_repayment_schedule(loan))

        self._store.save_loan(loan)
        logger.info(
            "Loan application processed loan_id=%s status=%s successful_payments=%s emi=%s",
            loan.id,
            loan.status.value,
            eligibility["successful_payments"],
            loan.emi_amount,
        )
        return loan

    def repay_emi(self, loan_id: str, repayment_id: str) -> LoanModel:
        """Pay one scheduled installment in full.

        Raises:
            ModelNotFoundError: If the loan or installment does not exist.
            ModelValidationError: If the loan is not approved.
            AlreadySettledError: If the installment is not pending. The balance is untouched.
            StorageError: If the update cannot be persisted.
        """
        loan = self._load_loan(loan_id)
        if not loan.is_approved:
            raise ModelValidationError("Loan is not approved: {0}".format(loan_id))
        repayment = loan.find_repayment(repayment_id)
        if repayment is None:
            raise ModelNotFoundError("Repayment not found: {0} on loan {1}".format(repayment_id, loan_id))
        if not repayment.is_pending:
            raise AlreadySettledError(
                "Repayment {0} is already {1}".format(repayment_id, repayment.status.value.lower())
            )

        paid = repayment.with_changes(status=RepaymentStatus.PAID, paid_at=self._clock())
        repayments = [paid if item.id == repayment_id else item for item in loan.repayments]
        remaining_balance = loan_math.apply_repayment(loan.remaining_balance, repayment.amount)
        if record_filters.first_pending(repayments) is None:
            # Flat EMIs round to whole units; the last installment clears any residue.
            remaining_balance = 0.0

        updated = self._store.update_loan(loan_id, {"repayments": repayments, "remaining_balance": remaining_balance})
        logger.info(
            "EMI repayment successful loan_id=%s repayment_id=%s remaining_balance=%s",
            loan_id,
            repayment_id,
            updated.remaining_balance,
        )
        return updated

    def repay_next_emi(self, loan_id: str) -> LoanModel:
        """Pay the next installment by loan id alone.

        Deprecated: prefer `repay_emi` with an explicit repayment id. Loans
        without a schedule are handled on the flat model, where each call
        records a paid installment after the fact.
        """
        loan = self._load_loan(loan_id)
        if not loan.is_approved:
            raise ModelValidationError("Loan is not approved: {0}".format(loan_id))
        if loan.remaining_balance <= 0:
            raise AlreadySettledError("Loan is fully repaid: {0}".format(loan_id))

        next_due = record_filters.first_pending(loan.repayments)
        if next_due is not None:
            return self.repay_emi(loan_id, next_due.id)

        logger.warning("Flat-model repayment used for loan_id=%s", loan_id)
        now = self._clock()
        sequence_no = len(loan.repayments) + 1
        remaining_balance = loan_math.apply_repayment(loan.remaining_balance, loan.emi_amount)
        if sequence_no >= loan.term_months:
            remaining_balance = 0.0
        record = LoanRepaymentModel(
            id=new_record_id("repay"),
            loan_id=loan_id,
            sequence_no=sequence_no,
            amount=loan.emi_amount,
            due_date=now,
            paid_at=now,
            status=RepaymentStatus.PAID,
        )
        updated = self._store.update_loan(
            loan_id,
            {"repayments": list(loan.repayments) + [record], "remaining_balance": remaining_balance},
        )
        logger.info("EMI repayment successful loan_id=%s remaining_balance=%s", loan_id, updated.remaining_balance)
        return updated

    def get_next_due_repayment(self, loan_id: str) -> Optional[LoanRepaymentModel]:
        """Return the first pending installment in schedule order."""
        return record_filters.first_pending(self._load_loan(loan_id).repayments)

    def get_overdue_repayments(self, loan_id: str, as_of: Optional[datetime] = None) -> List[LoanRepaymentModel]:
        """Return pending installments past their due date. Statuses are not changed."""
        return record_filters.past_due(self._load_loan(loan_id).repayments, as_of or self._clock())

    def get_user_loans(self, user_id: str) -> List[LoanModel]:
        """Return a user's loans in storage order."""
        return record_filters.for_user(self._store.get_loans(), user_id)

    def get_all_loans(self) -> List[LoanModel]:
        """Return every loan. Privileged view."""
        return self._store.get_loans()

    def get_loan_by_id(self, loan_id: str) -> LoanModel:
        """Return one loan.

        Raises:
            ModelNotFoundError: If the id is unknown.
        """
        return self._load_loan(loan_id)
