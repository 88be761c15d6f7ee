"""Public model package exports for PayLite."""

from .base import BaseRecordModel, Money, new_record_id, round_money, utc_now
from .enums import LoanStatus, PaymentChannel, RepaymentStatus, TransactionStatus, UserRole
from .exceptions import (
    AlreadySettledError,
    AuthenticationError,
    AuthorizationError,
    DuplicateEmailError,
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    StorageError,
)
from .loans import LoanApplicationModel, LoanModel
from .repayments import LoanRepaymentModel
from .repositories import RecordStore
from .transactions import PaymentRequestModel, TransactionModel
from .users import AuthStateModel, UserModel

__all__ = [
    "BaseRecordModel",
    "Money",
    "new_record_id",
    "round_money",
    "utc_now",
    "UserModel",
    "AuthStateModel",
    "PaymentRequestModel",
    "TransactionModel",
    "LoanApplicationModel",
    "LoanModel",
    "LoanRepaymentModel",
    "UserRole",
    "PaymentChannel",
    "TransactionStatus",
    "LoanStatus",
    "RepaymentStatus",
    "ModelError",
    "ModelValidationError",
    "DuplicateEmailError",
    "ModelNotFoundError",
    "AlreadySettledError",
    "StorageError",
    "AuthenticationError",
    "AuthorizationError",
    "RecordStore",
]
