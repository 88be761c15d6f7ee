"""Shared fixtures for PayLite unit tests."""

from datetime import datetime, timedelta, timezone
from itertools import cycle
from typing import Any, Dict, Iterable

from paylite.core.config import AppSettings, build_settings


START = datetime(2024, 1, 31, 9, 30, tzinfo=timezone.utc)


def make_settings(**sections: Dict[str, Any]) -> AppSettings:
    """Build settings with no processing delay and a cheap password hash."""
    config: Dict[str, Dict[str, Any]] = {
        "storage": {"backend": "memory"},
        "payments": {"processing_delay_sec": 0},
        "loans": {"processing_delay_sec": 0},
        "auth": {"pbkdf2_iterations": 1000},
    }
    for name, values in sections.items():
        config.setdefault(name, {}).update(values)
    return build_settings(config)


class FixedClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


class SequenceRandom:
    """Random source replaying fixed values in a loop."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = cycle(list(values))

    def random(self) -> float:
        return next(self._values)


ALWAYS_SUCCESS = SequenceRandom([0.0])
