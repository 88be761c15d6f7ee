"""Record store interface for datastore-agnostic model access.

Every collection is read and written as a whole ordered list, mirroring a
key-value backend where one key holds one JSON array. Concrete stores only
implement the three raw collection primitives; the typed helpers below are
shared.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .exceptions import ModelNotFoundError, ModelValidationError, StorageError
from .loans import LoanModel
from .transactions import TransactionModel
from .users import AuthStateModel, UserModel


logger = logging.getLogger(__name__)

USERS_KEY = "users"
TRANSACTIONS_KEY = "transactions"
LOANS_KEY = "loans"
AUTH_KEY = "auth_state"

ALL_KEYS = (AUTH_KEY, TRANSACTIONS_KEY, LOANS_KEY, USERS_KEY)


class RecordStore(ABC):
    """Common contract for whole-collection reads and writes."""

    @abstractmethod
    def read_key(self, key: str) -> Optional[Any]:
        """Return the decoded value stored under `key`, or None when absent.

        Raises:
            StorageError: If the backend cannot be read.
        """

    @abstractmethod
    def write_key(self, key: str, value: Any) -> None:
        """Replace the value stored under `key` in one step.

        Raises:
            StorageError: If the backend cannot be written.
        """

    @abstractmethod
    def remove_keys(self, keys: Sequence[str]) -> None:
        """Delete the given keys, ignoring ones that do not exist."""

    def _read_rows(self, key: str) -> List[Dict[str, Any]]:
        """Read a collection as a list of raw record dictionaries."""
        value = self.read_key(key)
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(row, dict) for row in value):
            logger.error("Stored collection is not a list of records key=%s", key)
            raise StorageError("Malformed collection {0}: expected a list of records".format(key))
        return [dict(row) for row in value]

    def _append_row(self, key: str, row: Dict[str, Any]) -> None:
        """Append one record and write the whole collection back."""
        rows = self._read_rows(key)
        rows.append(row)
        self.write_key(key, rows)

    # Users

    def get_users(self) -> List[UserModel]:
        """Return all users in storage order."""
        return [UserModel.from_record(row) for row in self._read_rows(USERS_KEY)]

    def save_user(self, user: UserModel) -> UserModel:
        """Insert or replace a user by id."""
        rows = [row for row in self._read_rows(USERS_KEY) if row.get("id") != user.id]
        rows.append(user.to_record())
        self.write_key(USERS_KEY, rows)
        logger.info("User saved user_id=%s", user.id)
        return user

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        """Return the user with a case-insensitive email match."""
        normalized = (email or "").strip().lower()
        for user in self.get_users():
            if user.email == normalized:
                return user
        return None

    # Transactions

    def get_transactions(self) -> List[TransactionModel]:
        """Return all transactions in storage order."""
        return [TransactionModel.from_record(row) for row in self._read_rows(TRANSACTIONS_KEY)]

    def save_transaction(self, transaction: TransactionModel) -> TransactionModel:
        """Append one transaction."""
        self._append_row(TRANSACTIONS_KEY, transaction.to_record())
        logger.info("Transaction saved transaction_id=%s", transaction.id)
        return transaction

    # Loans

    def get_loans(self) -> List[LoanModel]:
        """Return all loans in storage order."""
        return [LoanModel.from_record(row) for row in self._read_rows(LOANS_KEY)]

    def save_loan(self, loan: LoanModel) -> LoanModel:
        """Append one loan."""
        self._append_row(LOANS_KEY, loan.to_record())
        logger.info("Loan saved loan_id=%s status=%s", loan.id, loan.status.value)
        return loan

    def update_loan(self, loan_id: str, fields: Dict[str, Any]) -> LoanModel:
        """Merge `fields` into the stored loan and write the collection back.

        Raises:
            ModelNotFoundError: If no loan has `loan_id`.
            ModelValidationError: If the merged record is invalid.
        """
        loans = self.get_loans()
        for index, loan in enumerate(loans):
            if loan.id == loan_id:
                updated = loan.with_changes(**fields)
                loans[index] = updated
                self.replace_loans(loans)
                logger.info("Loan updated loan_id=%s fields=%s", loan_id, sorted(fields))
                return updated
        raise ModelNotFoundError("Loan not found: {0}".format(loan_id))

    def replace_loans(self, loans: Sequence[LoanModel]) -> None:
        """Overwrite the loan collection."""
        self.write_key(LOANS_KEY, [loan.to_record() for loan in loans])

    # Session

    def get_auth_state(self) -> Optional[AuthStateModel]:
        """Return the persisted session, if any."""
        value = self.read_key(AUTH_KEY)
        if value is None:
            return None
        try:
            return AuthStateModel.model_validate(value)
        except ValidationError as exc:
            logger.exception("Stored auth state is malformed.")
            raise ModelValidationError(str(exc))

    def save_auth_state(self, auth_state: AuthStateModel) -> None:
        """Persist the current session."""
        self.write_key(AUTH_KEY, auth_state.model_dump(mode="json"))

    def clear_auth_state(self) -> None:
        """Remove the persisted session."""
        self.remove_keys([AUTH_KEY])

    def clear_all(self) -> None:
        """Wipe every collection. Data-reset utility only."""
        self.remove_keys(ALL_KEYS)
        logger.warning("All record collections cleared.")


__all__ = [
    "RecordStore",
    "USERS_KEY",
    "TRANSACTIONS_KEY",
    "LOANS_KEY",
    "AUTH_KEY",
    "ALL_KEYS",
]
