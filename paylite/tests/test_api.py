"""HTTP tests for the PayLite router."""

import unittest

from fastapi.testclient import TestClient

from paylite.main import app, create_app
from paylite.models.base import new_record_id
from paylite.models.enums import PaymentChannel, TransactionStatus
from paylite.models.transactions import TransactionModel
from paylite.repositories import InMemoryRecordStore
from paylite.tests.support import make_settings


class PayLiteApiTests(unittest.TestCase):
    """Exercise the main user and admin flows over HTTP."""

    def setUp(self) -> None:
        """Build an app over a fresh in-memory store."""
        self.store = InMemoryRecordStore()
        self.client = TestClient(create_app(settings=make_settings(), store=self.store))

    def _register(self, email: str = "owner@example.com", name: str = "Owner") -> dict:
        response = self.client.post("/auth/register", json={"email": email, "password": "secret1", "name": name})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def _headers(self, auth_state: dict) -> dict:
        return {"X-Auth-Token": auth_state["token"]}

    def _seed_successful_payments(self, user_id: str, count: int = 3) -> None:
        for index in range(count):
            self.store.save_transaction(
                TransactionModel(
                    id=new_record_id("txn"),
                    user_id=user_id,
                    amount=100 + index,
                    channel=PaymentChannel.UPI,
                    description="Seed {0}".format(index),
                    status=TransactionStatus.SUCCESS,
                )
            )

    def test_packaged_app_keeps_records_in_memory(self) -> None:
        self.assertIsInstance(app.state.record_store, InMemoryRecordStore)

    def test_logout_requires_session_token(self) -> None:
        registered = self._register()
        self.assertEqual(self.client.post("/auth/logout").status_code, 401)
        wrong = self.client.post("/auth/logout", headers={"X-Auth-Token": "not-the-token"})
        self.assertEqual(wrong.status_code, 401)
        session = self.client.get("/auth/session").json()
        self.assertTrue(session["is_authenticated"])
        self.assertEqual(session["token"], registered["token"])

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_register_login_logout(self) -> None:
        registered = self._register()
        self.assertEqual(registered["user"]["role"], "admin")
        self.assertNotIn("password_hash", registered["user"])
        self.assertEqual(self.client.get("/auth/session").json()["token"], registered["token"])

        duplicate = self.client.post(
            "/auth/register", json={"email": "OWNER@example.com", "password": "secret1", "name": "Again"}
        )
        self.assertEqual(duplicate.status_code, 409)
        short = self.client.post("/auth/register", json={"email": "x@example.com", "password": "123", "name": "X"})
        self.assertEqual(short.status_code, 422)

        self.assertEqual(self.client.post("/auth/logout", headers=self._headers(registered)).status_code, 200)
        self.assertFalse(self.client.get("/auth/session").json()["is_authenticated"])
        self.assertEqual(self.client.get("/dashboard", headers=self._headers(registered)).status_code, 401)

        bad = self.client.post("/auth/login", json={"email": "owner@example.com", "password": "wrong1"})
        self.assertEqual(bad.status_code, 401)
        good = self.client.post("/auth/login", json={"email": "owner@example.com", "password": "secret1"})
        self.assertEqual(good.status_code, 200)
        self.assertTrue(good.json()["is_authenticated"])

    def test_demo_login(self) -> None:
        response = self.client.post("/auth/demo")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["email"], "demo@paylite.com")

    def test_payments_flow(self) -> None:
        auth_state = self._register()
        headers = self._headers(auth_state)
        self.assertEqual(self.client.post("/payments", json={"amount": 10, "description": "x"}).status_code, 401)
        invalid = self.client.post("/payments", json={"amount": -5, "description": "Bad"}, headers=headers)
        self.assertEqual(invalid.status_code, 422)
        blank = self.client.post("/payments", json={"amount": 5, "description": "   "}, headers=headers)
        self.assertEqual(blank.status_code, 422)
        sub_cent = self.client.post("/payments", json={"amount": 0.004, "description": "Dust"}, headers=headers)
        self.assertEqual(sub_cent.status_code, 422)

        created = self.client.post(
            "/payments",
            json={"amount": 250, "channel": "Card", "description": "Shoes", "channel_ref": "**** 1111"},
            headers=headers,
        )
        self.assertEqual(created.status_code, 201, created.text)
        transaction = created.json()
        self.assertIn(transaction["status"], {"Success", "Failed", "Pending"})

        history = self.client.get("/payments", headers=headers).json()
        self.assertEqual(history["count"], 1)
        self.assertEqual(self.client.get("/payments/" + transaction["id"], headers=headers).json()["amount"], 250.0)
        invoice = self.client.get("/payments/{0}/invoice".format(transaction["id"]), headers=headers).json()
        self.assertTrue(invoice["invoice_number"].startswith("INV-"))
        self.assertEqual(self.client.get("/payments/txn_missing", headers=headers).status_code, 404)

    def test_loan_quote(self) -> None:
        quote = self.client.post("/loans/quote", json={"amount": 20000, "term_months": 12})
        self.assertEqual(quote.status_code, 200)
        self.assertEqual(quote.json()["emi_amount"], 1867)
        self.assertEqual(self.client.post("/loans/quote", json={"amount": 5000, "term_months": 12}).status_code, 422)

    def test_loan_flow(self) -> None:
        auth_state = self._register()
        headers = self._headers(auth_state)
        self._seed_successful_payments(auth_state["user"]["id"])
        self.assertTrue(self.client.get("/loans/eligibility", headers=headers).json()["eligible"])

        created = self.client.post(
            "/loans", json={"amount": 20000, "term_months": 12, "purpose": "Laptop"}, headers=headers
        )
        self.assertEqual(created.status_code, 201, created.text)
        loan = created.json()
        self.assertEqual(loan["status"], "Approved")
        self.assertEqual(len(loan["repayments"]), 12)

        detail = self.client.get("/loans/" + loan["id"], headers=headers).json()
        self.assertEqual(detail["next_due"]["sequence_no"], 1)

        pay_url = "/loans/{0}/repayments/{1}/pay".format(loan["id"], loan["repayments"][0]["id"])
        paid = self.client.post(pay_url, headers=headers)
        self.assertEqual(paid.status_code, 200)
        self.assertEqual(paid.json()["remaining_balance"], 22400.0 - 1867)
        self.assertEqual(self.client.post(pay_url, headers=headers).status_code, 409)

        next_paid = self.client.post("/loans/{0}/repay-next".format(loan["id"]), headers=headers)
        self.assertEqual(next_paid.json()["repayments"][1]["status"], "Paid")
        self.assertEqual(self.client.get("/loans", headers=headers).json()["count"], 1)
        self.assertEqual(self.client.get("/loans/loan_missing", headers=headers).status_code, 404)
        self.assertEqual(len(self.client.get("/dashboard", headers=headers).json()["active_loans"]), 1)

    def test_loan_outside_limits(self) -> None:
        headers = self._headers(self._register())
        response = self.client.post(
            "/loans", json={"amount": 60000, "term_months": 12, "purpose": "Car"}, headers=headers
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.get_loans(), [])

    def test_admin_routes(self) -> None:
        admin = self._register()
        admin_headers = self._headers(admin)
        self.assertEqual(self.client.get("/admin/overview", headers=admin_headers).json()["total_users"], 1)
        self.assertEqual(self.client.get("/admin/users", headers=admin_headers).json()["count"], 1)
        self.assertEqual(self.client.get("/admin/transactions", headers=admin_headers).status_code, 200)
        self.assertEqual(self.client.get("/admin/loans", headers=admin_headers).status_code, 200)

        user = self._register(email="user@example.com", name="User")
        self.assertEqual(self.client.get("/admin/overview", headers=self._headers(user)).status_code, 403)
        self.assertEqual(self.client.get("/admin/overview", headers=admin_headers).status_code, 401)

        admin = self.client.post("/auth/login", json={"email": "owner@example.com", "password": "secret1"}).json()
        cleared = self.client.post("/admin/data/clear", headers=self._headers(admin))
        self.assertEqual(cleared.status_code, 200)
        self.assertEqual(self.store.get_users(), [])
        self.assertFalse(self.client.get("/auth/session").json()["is_authenticated"])


if __name__ == "__main__":
    unittest.main()
