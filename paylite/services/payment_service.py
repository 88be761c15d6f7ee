"""Simulated payment processing with weighted random outcomes."""

from __future__ import annotations

from datetime import datetime
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from paylite.common import record_filters
from paylite.common.invoice import build_invoice_data
from paylite.common.weighted_choice import RandomSource, weighted_draw
from paylite.core.config import AppSettings
from paylite.models.base import new_record_id, utc_now
from paylite.models.enums import TransactionStatus
from paylite.models.exceptions import ModelNotFoundError, ModelValidationError
from paylite.models.repositories import RecordStore
from paylite.models.transactions import PaymentRequestModel, TransactionModel


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _status_entries(weights: Dict[str, float]) -> List[Tuple[TransactionStatus, float]]:
    """Map configured `status -> weight` pairs onto transaction statuses."""
    entries: List[Tuple[TransactionStatus, float]] = []
    for name, weight in weights.items():
        try:
            entries.append((TransactionStatus(name), float(weight)))
        except ValueError:
            logger.warning("Ignoring unknown payment status weight status=%s", name)
    if not entries:
        raise ModelValidationError("No valid payment status weights configured.")
    return entries


class PaymentService:
    """Creates transactions for payment requests and answers history queries."""

    def __init__(
        self,
        settings: AppSettings,
        store: RecordStore,
        random_source: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize payment dependencies.

        Args:
            settings: Application settings (status weights, processing delay).
            store: Record store holding transactions.
            random_source: Object with `random()`; fix it to make outcomes deterministic.
            clock: Returns the current UTC time.
            sleep: Used for the simulated processing delay.
        """
        self._settings = settings
        self._store = store
        self._random = random_source or random.Random()
        self._clock = clock or utc_now
        self._sleep = sleep
        self._status_entries = _status_entries(settings.payment_status_weights)

    def draw_status(self) -> TransactionStatus:
        """Draw one payment outcome from the configured distribution."""
        return weighted_draw(self._status_entries, self._random)

    def process_payment(self, user_id: str, request: PaymentRequestModel | Dict[str, Any]) -> TransactionModel:
        """Resolve and persist one payment attempt.

        Args:
            user_id: Paying user.
            request: Amount, channel, description and optional channel reference.

        Returns:
            TransactionModel: The stored transaction with its final status.

        Raises:
            ModelValidationError: If the request is invalid. Nothing is stored.
            StorageError: If the transaction cannot be persisted.
        """
        try:
            payment = request if isinstance(request, PaymentRequestModel) else PaymentRequestModel.model_validate(request)
        except ValidationError as exc:
            raise ModelValidationError(str(exc))
        if not str(user_id or "").strip():
            raise ModelValidationError("user_id is required")

        logger.info("Processing payment user_id=%s amount=%s channel=%s", user_id, payment.amount, payment.channel.value)
        if self._settings.payment_processing_delay_sec > 0:
            self._sleep(self._settings.payment_processing_delay_sec)

        status = self.draw_status()
        try:
            transaction = TransactionModel(
                id=new_record_id("txn"),
                user_id=user_id,
                amount=payment.amount,
                channel=payment.channel,
                description=payment.description,
                channel_ref=payment.channel_ref,
                merchant_name=payment.merchant_name,
                status=status,
                created_at=self._clock(),
            )
        except ValidationError as exc:
            raise ModelValidationError(str(exc))

        self._store.save_transaction(transaction)
        logger.info("Payment processed transaction_id=%s status=%s", transaction.id, status.value)
        return transaction

    def get_transaction_history(self, user_id: str) -> List[TransactionModel]:
        """Return a user's transactions in storage order."""
        return record_filters.for_user(self._store.get_transactions(), user_id)

    def get_all_transactions(self) -> List[TransactionModel]:
        """Return every transaction. Privileged view."""
        return self._store.get_transactions()

    def get_transaction_by_id(self, transaction_id: str) -> TransactionModel:
        """Return one transaction.

        Raises:
            ModelNotFoundError: If the id is unknown.
        """
        transaction = record_filters.find_by_id(self._store.get_transactions(), transaction_id)
        if transaction is None:
            raise ModelNotFoundError("Transaction not found: {0}".format(transaction_id))
        return transaction

    def generate_invoice(self, transaction_id: str) -> Dict[str, Any]:
        """Return invoice data for one transaction."""
        transaction = self.get_transaction_by_id(transaction_id)
        invoice = build_invoice_data(transaction, merchant_fallback=self._settings.app_name)
        logger.info("Invoice generated transaction_id=%s invoice=%s", transaction_id, invoice["invoice_number"])
        return invoice
