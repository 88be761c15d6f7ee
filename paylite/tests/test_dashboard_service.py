"""Unit tests for dashboard aggregates."""

import unittest

from paylite.models.enums import UserRole
from paylite.models.users import UserModel
from paylite.repositories import InMemoryRecordStore
from paylite.services import DashboardService, LoanService, PaymentService
from paylite.tests.support import START, FixedClock, SequenceRandom, make_settings


class DashboardServiceTests(unittest.TestCase):
    """Validate user and admin totals."""

    def setUp(self) -> None:
        """Seed two users, their payments, and one approved loan."""
        self.store = InMemoryRecordStore()
        self.clock = FixedClock()
        settings = make_settings()
        self.store.save_user(UserModel(id="user_1", email="a@example.com", name="Alice", role=UserRole.ADMIN, created_at=START))
        self.clock.advance(minutes=1)
        self.store.save_user(UserModel(id="user_2", email="b@example.com", name="Bob", created_at=self.clock.now))

        payments = PaymentService(
            settings=settings,
            store=self.store,
            random_source=SequenceRandom([0.0, 0.0, 0.0, 0.75]),
            clock=self.clock,
        )
        for amount in (100, 200, 300, 400):
            self.clock.advance(minutes=1)
            payments.process_payment("user_1", {"amount": amount, "description": "Order {0}".format(amount)})
        self.clock.advance(minutes=1)
        payments.process_payment("user_2", {"amount": 50, "description": "Snack"})

        loans = LoanService(settings=settings, store=self.store, clock=self.clock)
        self.loan = loans.apply_for_loan("user_1", {"amount": 20000, "term_months": 12, "purpose": "Laptop"})
        loans.apply_for_loan("user_2", {"amount": 10000, "term_months": 6, "purpose": "Phone"})
        self.service = DashboardService(store=self.store, recent_limit=3)

    def test_user_summary(self) -> None:
        summary = self.service.user_summary("user_1")
        self.assertEqual(summary["user_id"], "user_1")
        self.assertEqual(summary["total_transactions"], 4)
        self.assertEqual(summary["successful_transactions"], 3)
        self.assertEqual(summary["total_spent"], 600.0)
        self.assertEqual(summary["total_loans"], 1)
        self.assertEqual(summary["approved_loans"], 1)
        self.assertEqual(summary["total_loan_amount"], 20000.0)
        self.assertEqual(summary["total_outstanding"], 22400.0)
        self.assertEqual([loan["id"] for loan in summary["active_loans"]], [self.loan.id])
        self.assertEqual([item["amount"] for item in summary["recent_transactions"]], [400.0, 300.0, 200.0])

    def test_user_without_activity(self) -> None:
        summary = self.service.user_summary("user_3")
        self.assertEqual(summary["total_transactions"], 0)
        self.assertEqual(summary["total_spent"], 0.0)
        self.assertEqual(summary["active_loans"], [])

    def test_admin_overview(self) -> None:
        overview = self.service.admin_overview()
        self.assertEqual(overview["total_users"], 2)
        self.assertEqual(overview["total_transactions"], 5)
        self.assertEqual(overview["successful_transactions"], 4)
        self.assertEqual(overview["total_revenue"], 650.0)
        self.assertEqual(overview["total_loans"], 2)
        self.assertEqual(overview["approved_loans"], 1)
        self.assertEqual(overview["total_outstanding"], 22400.0)

    def test_admin_user_rows(self) -> None:
        rows = self.service.admin_user_rows()
        self.assertEqual([row["user"]["id"] for row in rows], ["user_2", "user_1"])
        self.assertEqual(rows[1]["transaction_count"], 4)
        self.assertEqual(rows[1]["successful_payments"], 3)
        self.assertEqual(rows[0]["loan_count"], 1)
        self.assertNotIn("password_hash", rows[0]["user"])


if __name__ == "__main__":
    unittest.main()
