"""Service layer exports."""

from .auth_service import AuthService, hash_password, verify_password
from .dashboard_service import DashboardService
from .loan_service import LoanService
from .payment_service import PaymentService

__all__ = [
    "AuthService",
    "DashboardService",
    "LoanService",
    "PaymentService",
    "hash_password",
    "verify_password",
]
