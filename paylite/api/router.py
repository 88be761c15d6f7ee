"""PayLite router exposing auth, payment, loan, and dashboard APIs."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Header, HTTPException, status
from pydantic import BaseModel, Field

from paylite.core.config import AppSettings
from paylite.models.enums import PaymentChannel
from paylite.models.exceptions import (
    AlreadySettledError,
    AuthenticationError,
    AuthorizationError,
    DuplicateEmailError,
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    StorageError,
)
from paylite.models.repositories import RecordStore
from paylite.services import AuthService, DashboardService, LoanService, PaymentService


logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    """Request payload for account registration."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Request payload for login."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class PaymentCreateRequest(BaseModel):
    """Request payload for a simulated payment."""

    amount: float = Field(..., gt=0)
    channel: PaymentChannel = Field(default=PaymentChannel.UPI)
    description: str = Field(..., min_length=1)
    channel_ref: Optional[str] = Field(default=None)
    merchant_name: Optional[str] = Field(default=None)


class LoanApplyRequest(BaseModel):
    """Request payload for a loan application."""

    amount: float = Field(..., gt=0)
    term_months: int = Field(..., gt=0)
    purpose: str = Field(..., min_length=1)


class LoanQuoteRequest(BaseModel):
    """Request payload for an EMI preview."""

    amount: float = Field(..., gt=0)
    term_months: int = Field(..., gt=0)


_STATUS_BY_ERROR = (
    (DuplicateEmailError, status.HTTP_409_CONFLICT),
    (ModelValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ModelNotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadySettledError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _http_error(exc: ModelError) -> HTTPException:
    """Map a domain error onto an HTTP error response."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _dump(records: List[Any]) -> List[Dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


def build_router(settings: AppSettings, store: RecordStore) -> APIRouter:
    """Build the PayLite router around one record store."""
    router = APIRouter()
    auth_service = AuthService(settings=settings, store=store)
    payment_service = PaymentService(settings=settings, store=store)
    loan_service = LoanService(settings=settings, store=store)
    dashboard_service = DashboardService(store=store)

    @router.get("/health", summary="Liveness check")
    def health() -> Dict[str, Any]:
        """Return service name and status."""
        return {"status": "ok", "app": settings.app_name}

    # -- Auth ---------------------------------------------------------------

    @router.post("/auth/register", summary="Register and sign in", status_code=status.HTTP_201_CREATED)
    def register(payload: RegisterRequest) -> Dict[str, Any]:
        """Create an account. The first account ever created is the admin."""
        try:
            return auth_service.register(payload.email, payload.password, payload.name).public_view()
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/auth/login", summary="Sign in")
    def login(payload: LoginRequest) -> Dict[str, Any]:
        """Verify credentials and return the new session."""
        try:
            return auth_service.login(payload.email, payload.password).public_view()
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/auth/demo", summary="Sign in the demo account")
    def demo_login() -> Dict[str, Any]:
        """Create the demo account on first use and sign it in."""
        try:
            return auth_service.demo_login().public_view()
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/auth/logout", summary="Sign out")
    def logout(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Clear the current session. Only its holder can sign it out."""
        try:
            auth_service.require_session(x_auth_token)
            auth_service.logout()
            return {"is_authenticated": False}
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/auth/session", summary="Current session")
    def session() -> Dict[str, Any]:
        """Return the stored session, or a signed-out state."""
        try:
            return auth_service.get_current_session().public_view()
        except ModelError as exc:
            raise _http_error(exc)

    # -- Payments -----------------------------------------------------------

    @router.post("/payments", summary="Make a simulated payment", status_code=status.HTTP_201_CREATED)
    def make_payment(payload: PaymentCreateRequest, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Resolve a payment with a weighted random outcome."""
        try:
            user = auth_service.require_session(x_auth_token)
            return payment_service.process_payment(user.id, payload.model_dump()).model_dump(mode="json")
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/payments", summary="Payment history of the signed-in user")
    def payment_history(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return the user's transactions, newest first."""
        try:
            user = auth_service.require_session(x_auth_token)
            transactions = payment_service.get_transaction_history(user.id)
            transactions.sort(key=lambda item: item.created_at, reverse=True)
            return {"user_id": user.id, "count": len(transactions), "transactions": _dump(transactions)}
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/payments/{transaction_id}", summary="Transaction by id")
    def payment_by_id(transaction_id: str, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return one of the user's transactions. Admins can read any."""
        try:
            user = auth_service.require_session(x_auth_token)
            transaction = payment_service.get_transaction_by_id(transaction_id)
            if transaction.user_id != user.id and not user.is_admin:
                raise ModelNotFoundError("Transaction not found: {0}".format(transaction_id))
            return transaction.model_dump(mode="json")
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/payments/{transaction_id}/invoice", summary="Invoice for a transaction")
    def payment_invoice(transaction_id: str, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return invoice data for one of the user's transactions."""
        try:
            user = auth_service.require_session(x_auth_token)
            transaction = payment_service.get_transaction_by_id(transaction_id)
            if transaction.user_id != user.id and not user.is_admin:
                raise ModelNotFoundError("Transaction not found: {0}".format(transaction_id))
            return payment_service.generate_invoice(transaction_id)
        except ModelError as exc:
            raise _http_error(exc)

    # -- Loans --------------------------------------------------------------

    @router.post("/loans/quote", summary="Preview EMI for a loan")
    def loan_quote(payload: LoanQuoteRequest) -> Dict[str, Any]:
        """Price a loan without applying."""
        try:
            return loan_service.quote_emi(payload.amount, payload.term_months)
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/loans/eligibility", summary="Auto-approval eligibility of the signed-in user")
    def loan_eligibility(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return successful payment count against the approval threshold."""
        try:
            user = auth_service.require_session(x_auth_token)
            return loan_service.check_eligibility(user.id)
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/loans", summary="Apply for a loan", status_code=status.HTTP_201_CREATED)
    def apply_for_loan(payload: LoanApplyRequest, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Apply for a loan; eligible users are approved immediately."""
        try:
            user = auth_service.require_session(x_auth_token)
            return loan_service.apply_for_loan(user.id, payload.model_dump()).model_dump(mode="json")
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/loans", summary="Loans of the signed-in user")
    def user_loans(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return the user's loans, newest first."""
        try:
            user = auth_service.require_session(x_auth_token)
            loans = loan_service.get_user_loans(user.id)
            loans.sort(key=lambda item: item.applied_at, reverse=True)
            return {"user_id": user.id, "count": len(loans), "loans": _dump(loans)}
        except ModelError as exc:
            raise _http_error(exc)

    def _owned_loan_id(loan_id: str, x_auth_token: Optional[str]) -> str:
        user = auth_service.require_session(x_auth_token)
        loan = loan_service.get_loan_by_id(loan_id)
        if loan.user_id != user.id and not user.is_admin:
            raise ModelNotFoundError("Loan not found: {0}".format(loan_id))
        return loan.id

    @router.get("/loans/{loan_id}", summary="Loan by id")
    def loan_by_id(loan_id: str, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return one loan with its schedule and next due installment."""
        try:
            _owned_loan_id(loan_id, x_auth_token)
            loan = loan_service.get_loan_by_id(loan_id)
            next_due = loan_service.get_next_due_repayment(loan_id)
            return {
                "loan": loan.model_dump(mode="json"),
                "next_due": next_due.model_dump(mode="json") if next_due is not None else None,
                "overdue": _dump(loan_service.get_overdue_repayments(loan_id)),
            }
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/loans/{loan_id}/repayments/{repayment_id}/pay", summary="Pay one installment")
    def repay_emi(loan_id: str, repayment_id: str, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Mark one scheduled installment paid."""
        try:
            _owned_loan_id(loan_id, x_auth_token)
            return loan_service.repay_emi(loan_id, repayment_id).model_dump(mode="json")
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/loans/{loan_id}/repay-next", summary="Pay the next installment (deprecated)", deprecated=True)
    def repay_next_emi(loan_id: str, x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Pay whichever installment is due next."""
        try:
            _owned_loan_id(loan_id, x_auth_token)
            return loan_service.repay_next_emi(loan_id).model_dump(mode="json")
        except ModelError as exc:
            raise _http_error(exc)

    # -- Dashboards ---------------------------------------------------------

    @router.get("/dashboard", summary="Dashboard totals of the signed-in user")
    def dashboard(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return payment and loan totals for the user."""
        try:
            user = auth_service.require_session(x_auth_token)
            return dashboard_service.user_summary(user.id)
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/admin/overview", summary="Platform totals")
    def admin_overview(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return platform-wide totals."""
        try:
            auth_service.require_admin(x_auth_token)
            return dashboard_service.admin_overview()
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/admin/users", summary="All users with activity counts")
    def admin_users(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return per-user counts."""
        try:
            auth_service.require_admin(x_auth_token)
            rows = dashboard_service.admin_user_rows()
            return {"count": len(rows), "users": rows}
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/admin/transactions", summary="All transactions")
    def admin_transactions(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return every transaction, newest first."""
        try:
            auth_service.require_admin(x_auth_token)
            transactions = payment_service.get_all_transactions()
            transactions.sort(key=lambda item: item.created_at, reverse=True)
            return {"count": len(transactions), "transactions": _dump(transactions)}
        except ModelError as exc:
            raise _http_error(exc)

    @router.get("/admin/loans", summary="All loans")
    def admin_loans(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Return every loan, newest first."""
        try:
            auth_service.require_admin(x_auth_token)
            loans = loan_service.get_all_loans()
            loans.sort(key=lambda item: item.applied_at, reverse=True)
            return {"count": len(loans), "loans": _dump(loans)}
        except ModelError as exc:
            raise _http_error(exc)

    @router.post("/admin/data/clear", summary="Wipe all stored data")
    def admin_clear_data(x_auth_token: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        """Delete every collection, including the session."""
        try:
            admin = auth_service.require_admin(x_auth_token)
            store.clear_all()
            logger.warning("All data cleared by admin user_id=%s", admin.id)
            return {"cleared": True}
        except ModelError as exc:
            raise _http_error(exc)

    return router
