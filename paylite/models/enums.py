"""Reusable enums for PayLite records."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""


class UserRole(StringEnum):
    """Role names used for privileged views."""

    USER = "user"
    ADMIN = "admin"


class PaymentChannel(StringEnum):
    """Simulated payment rails."""

    UPI = "UPI"
    CARD = "Card"


class TransactionStatus(StringEnum):
    """Outcome of a simulated payment."""

    SUCCESS = "Success"
    FAILED = "Failed"
    PENDING = "Pending"


class LoanStatus(StringEnum):
    """Loan lifecycle states."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RepaymentStatus(StringEnum):
    """Installment payment states."""

    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"
