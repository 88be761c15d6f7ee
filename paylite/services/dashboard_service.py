"""Aggregate statistics for the user dashboard and the admin overview."""

import logging
from typing import Any, Dict, List

from paylite.common import record_filters
from paylite.models.loans import LoanModel
from paylite.models.repositories import RecordStore
from paylite.models.transactions import TransactionModel


logger = logging.getLogger(__name__)


def _summarize(transactions: List[TransactionModel], loans: List[LoanModel]) -> Dict[str, Any]:
    approved_loans = record_filters.approved(loans)
    return {
        "total_transactions": len(transactions),
        "successful_transactions": record_filters.count_successful(transactions),
        "total_loans": len(loans),
        "approved_loans": len(approved_loans),
        "total_loan_amount": record_filters.sum_principal(approved_loans),
        "total_outstanding": record_filters.sum_outstanding(approved_loans),
    }


class DashboardService:
    """Read-only aggregates over the record store."""

    def __init__(self, store: RecordStore, recent_limit: int = 5) -> None:
        self._store = store
        self._recent_limit = recent_limit

    def user_summary(self, user_id: str) -> Dict[str, Any]:
        """Return one user's payment and loan totals."""
        transactions = record_filters.for_user(self._store.get_transactions(), user_id)
        loans = record_filters.for_user(self._store.get_loans(), user_id)
        summary = _summarize(transactions, loans)
        summary["user_id"] = user_id
        summary["total_spent"] = record_filters.sum_successful_amount(transactions)
        summary["active_loans"] = [
            loan.model_dump(mode="json") for loan in record_filters.newest_first(record_filters.active(loans), "applied_at")
        ]
        summary["recent_transactions"] = [
            item.model_dump(mode="json") for item in record_filters.newest_first(transactions)[: self._recent_limit]
        ]
        return summary

    def admin_overview(self) -> Dict[str, Any]:
        """Return platform-wide totals. Privileged view."""
        transactions = self._store.get_transactions()
        summary = _summarize(transactions, self._store.get_loans())
        summary["total_users"] = len(self._store.get_users())
        summary["total_revenue"] = record_filters.sum_successful_amount(transactions)
        logger.info("Admin overview computed users=%s transactions=%s", summary["total_users"], len(transactions))
        return summary

    def admin_user_rows(self) -> List[Dict[str, Any]]:
        """Return per-user activity counts, newest user first."""
        transactions = self._store.get_transactions()
        loans = self._store.get_loans()
        rows: List[Dict[str, Any]] = []
        for user in record_filters.newest_first(self._store.get_users()):
            user_transactions = record_filters.for_user(transactions, user.id)
            rows.append(
                {
                    "user": user.public_view(),
                    "transaction_count": len(user_transactions),
                    "loan_count": len(record_filters.for_user(loans, user.id)),
                    "successful_payments": record_filters.count_successful(user_transactions),
                }
            )
        return rows
