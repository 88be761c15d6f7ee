"""Unit tests for PayLite domain models."""

from datetime import datetime, timedelta, timezone
import unittest

from pydantic import ValidationError

from paylite.models.enums import LoanStatus, PaymentChannel, RepaymentStatus
from paylite.models.exceptions import ModelValidationError
from paylite.models.loans import LoanApplicationModel, LoanModel
from paylite.models.repayments import LoanRepaymentModel
from paylite.models.transactions import PaymentRequestModel, TransactionModel
from paylite.models.users import AuthStateModel, UserModel


APPROVED_AT = datetime(2024, 1, 15, tzinfo=timezone.utc)


def _repayment(sequence_no: int, loan_id: str = "loan_1", **overrides) -> LoanRepaymentModel:
    payload = {
        "id": "repay_{0}".format(sequence_no),
        "loan_id": loan_id,
        "sequence_no": sequence_no,
        "amount": 1767,
        "due_date": APPROVED_AT + timedelta(days=30 * sequence_no),
    }
    payload.update(overrides)
    return LoanRepaymentModel(**payload)


def _approved_payload(**overrides) -> dict:
    payload = {
        "id": "loan_1",
        "user_id": "user_1",
        "amount": 10000,
        "purpose": "Laptop",
        "status": LoanStatus.APPROVED,
        "interest_rate": 12,
        "term_months": 6,
        "emi_amount": 1767,
        "total_amount": 10600,
        "remaining_balance": 10600,
        "applied_at": APPROVED_AT,
        "approved_at": APPROVED_AT,
        "repayments": [_repayment(index) for index in range(1, 7)],
    }
    payload.update(overrides)
    return payload


class ModelValidationTests(unittest.TestCase):
    """Test model happy paths and business rules."""

    def test_user_email_normalized(self) -> None:
        user = UserModel(id="user_1", email="  Alice@Example.COM ", name="Alice")
        self.assertEqual(user.email, "alice@example.com")
        self.assertFalse(user.is_admin)
        with self.assertRaises(ValidationError):
            UserModel(id="user_2", email="alice.example.com", name="Alice")

    def test_user_public_view_hides_hash(self) -> None:
        user = UserModel(id="user_1", email="a@example.com", name="Alice", password_hash="secret-hash")
        self.assertNotIn("password_hash", user.public_view())
        self.assertNotIn("secret-hash", repr(user))

    def test_payment_request_rules(self) -> None:
        request = PaymentRequestModel(amount=50, description=" Snacks ", channel_ref="  ")
        self.assertEqual(request.channel, PaymentChannel.UPI)
        self.assertEqual(request.description, "Snacks")
        self.assertIsNone(request.channel_ref)
        with self.assertRaises(ValidationError):
            PaymentRequestModel(amount=0, description="Zero")
        with self.assertRaises(ValidationError):
            PaymentRequestModel(amount=10, description="   ")

    def test_transaction_amount_rounded(self) -> None:
        transaction = TransactionModel(
            id="txn_1",
            user_id="user_1",
            amount=10.129,
            channel="Card",
            description="Taxi",
            status="Failed",
        )
        self.assertEqual(transaction.amount, 10.13)
        self.assertFalse(transaction.is_successful)

    def test_amounts_rounding_to_zero_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            PaymentRequestModel(amount=0.004, description="Dust")
        with self.assertRaises(ValidationError):
            TransactionModel(
                id="txn_1",
                user_id="user_1",
                amount=0.004,
                channel="UPI",
                description="Dust",
                status="Success",
            )
        with self.assertRaises(ValidationError):
            PaymentRequestModel(amount="lots", description="Words")
        self.assertEqual(PaymentRequestModel(amount="12.346", description="Text").amount, 12.35)

    def test_loan_application_rules(self) -> None:
        with self.assertRaises(ValidationError):
            LoanApplicationModel(amount=10000, term_months=0, purpose="Laptop")
        with self.assertRaises(ValidationError):
            LoanApplicationModel(amount=10000, term_months=12, purpose="")

    def test_approved_loan_happy_path(self) -> None:
        loan = LoanModel(**_approved_payload())
        self.assertTrue(loan.is_active)
        self.assertTrue(loan.has_schedule)
        self.assertEqual(loan.find_repayment("repay_3").sequence_no, 3)
        self.assertIsNone(loan.find_repayment("repay_99"))

    def test_non_approved_loan_cannot_carry_balance(self) -> None:
        with self.assertRaises(ValidationError):
            LoanModel(**_approved_payload(status=LoanStatus.PENDING, repayments=[]))
        with self.assertRaises(ValidationError):
            LoanModel(**_approved_payload(status=LoanStatus.REJECTED, remaining_balance=0))

    def test_pending_installments_require_balance(self) -> None:
        with self.assertRaises(ValidationError):
            LoanModel(**_approved_payload(remaining_balance=0))

    def test_fully_paid_schedule_requires_zero_balance(self) -> None:
        paid = [_repayment(index, status=RepaymentStatus.PAID, paid_at=APPROVED_AT) for index in range(1, 7)]
        with self.assertRaises(ValidationError):
            LoanModel(**_approved_payload(repayments=paid, remaining_balance=1))
        loan = LoanModel(**_approved_payload(repayments=paid, remaining_balance=0))
        self.assertFalse(loan.is_active)

    def test_repayments_must_belong_to_loan(self) -> None:
        with self.assertRaises(ValidationError):
            LoanModel(**_approved_payload(repayments=[_repayment(1, loan_id="loan_2")]))

    def test_with_changes_revalidates(self) -> None:
        loan = LoanModel(**_approved_payload())
        with self.assertRaises(ModelValidationError):
            loan.with_changes(remaining_balance=0)
        updated = loan.with_changes(remaining_balance=8833)
        self.assertEqual(updated.remaining_balance, 8833)
        self.assertEqual(loan.remaining_balance, 10600)

    def test_record_round_trip_drops_none(self) -> None:
        loan = LoanModel(**_approved_payload())
        record = loan.to_record()
        self.assertNotIn("paid_at", record["repayments"][0])
        self.assertEqual(record["status"], "Approved")
        self.assertEqual(LoanModel.from_record(record).repayments[5].sequence_no, 6)
        with self.assertRaises(ModelValidationError):
            LoanModel.from_record(dict(record, remaining_balance=-1))

    def test_validate_schedule(self) -> None:
        schedule = [_repayment(index) for index in range(1, 7)]
        LoanRepaymentModel.validate_schedule(schedule, expected_count=6)
        with self.assertRaises(ModelValidationError):
            LoanRepaymentModel.validate_schedule(schedule[:5], expected_count=6)
        gap = schedule[:2] + [_repayment(4)] + schedule[3:]
        with self.assertRaises(ModelValidationError):
            LoanRepaymentModel.validate_schedule(gap, expected_count=6)
        reordered = list(schedule)
        reordered[1] = _repayment(2, due_date=APPROVED_AT)
        with self.assertRaises(ModelValidationError):
            LoanRepaymentModel.validate_schedule(reordered, expected_count=6)

    def test_auth_state_expiry(self) -> None:
        state = AuthStateModel(is_authenticated=True, token="tok", expires_at=APPROVED_AT)
        self.assertFalse(state.is_expired(APPROVED_AT - timedelta(seconds=1)))
        self.assertTrue(state.is_expired(APPROVED_AT))
        self.assertFalse(AuthStateModel.signed_out().is_expired())


if __name__ == "__main__":
    unittest.main()
