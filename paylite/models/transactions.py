"""Payment request and transaction models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .base import BaseRecordModel, Money, round_money_input, utc_now
from .enums import PaymentChannel, TransactionStatus


class PaymentRequestModel(BaseModel):
    """Caller-supplied payment details."""

    amount: Money = Field(..., gt=0)
    channel: PaymentChannel = Field(default=PaymentChannel.UPI)
    description: str = Field(..., min_length=1)
    channel_ref: Optional[str] = Field(default=None, description="UPI handle or card reference.")
    merchant_name: Optional[str] = Field(default=None)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("amount", mode="before")
    @classmethod
    def _round_amount(cls, value: Any) -> Any:
        """Round to two decimals so sub-cent amounts fail the positive check."""
        return round_money_input(value)

    @field_validator("channel_ref", "merchant_name")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        """Treat blank optional text as absent."""
        if value is None:
            return None
        return value or None


class TransactionModel(BaseRecordModel):
    """A resolved payment attempt. Immutable once stored."""

    user_id: str = Field(..., min_length=3)
    amount: Money = Field(..., gt=0)
    channel: PaymentChannel = Field(...)
    description: str = Field(..., min_length=1)
    channel_ref: Optional[str] = Field(default=None)
    merchant_name: Optional[str] = Field(default=None)
    status: TransactionStatus = Field(...)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("amount", mode="before")
    @classmethod
    def _round_amount(cls, value: Any) -> Any:
        """Keep currency values at two decimals."""
        return round_money_input(value)

    @property
    def is_successful(self) -> bool:
        """Return whether the payment settled."""
        return self.status == TransactionStatus.SUCCESS
