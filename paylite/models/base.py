"""Shared base models and common type aliases."""

from datetime import datetime, timezone
import logging
from typing import Any, Dict, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ModelValidationError


logger = logging.getLogger(__name__)

Money = float

RecordT = TypeVar("RecordT", bound="BaseRecordModel")


def utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(timezone.utc)


def new_record_id(prefix: str) -> str:
    """Generate a prefixed unique identifier, e.g. `txn_3f9c0a...`."""
    return "{0}_{1}".format(prefix, uuid4().hex[:16])


def round_money(value: Any) -> Money:
    """Round a currency value to two decimals."""
    return round(float(value), 2)


def round_money_input(value: Any) -> Any:
    """Round numeric input to two decimals ahead of range checks.

    Non-numeric input is passed through for field validation to reject.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return round_money(value)
    if isinstance(value, str):
        try:
            return round_money(value)
        except ValueError:
            return value
    return value


class BaseRecordModel(BaseModel):
    """Base schema for records kept in the key-value record store."""

    id: str = Field(..., min_length=3, description="Unique record identifier.")

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=False,
    )

    def to_record(self) -> Dict[str, Any]:
        """Serialize model into a JSON-safe dictionary for the record store.

        Returns:
            Dict[str, Any]: Serialized model payload.

        Raises:
            ModelValidationError: If serialization fails.
        """
        try:
            return self.model_dump(mode="json", exclude_none=True)
        except Exception as exc:
            logger.exception("Failed to serialize %s with id=%s", self.__class__.__name__, self.id)
            raise ModelValidationError(str(exc))

    @classmethod
    def from_record(cls: type[RecordT], data: Dict[str, Any]) -> RecordT:
        """Create model instance from a stored record.

        Args:
            data: Record payload read from the store.

        Returns:
            BaseRecordModel: Typed domain instance.

        Raises:
            ModelValidationError: If payload parsing fails.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            logger.exception("Failed to parse stored payload for %s id=%s", cls.__name__, data.get("id"))
            raise ModelValidationError(str(exc))

    def with_changes(self: RecordT, **changes: Any) -> RecordT:
        """Return a re-validated copy with `changes` applied.

        All fields are validated together, so cross-field invariants are checked
        against the final state rather than field by field.

        Raises:
            ModelValidationError: If the resulting record is invalid.
        """
        payload = self.model_dump()
        payload.update(changes)
        try:
            return type(self).model_validate(payload)
        except ValidationError as exc:
            logger.exception("Invalid update for %s id=%s changes=%s", type(self).__name__, self.id, sorted(changes))
            raise ModelValidationError(str(exc))
