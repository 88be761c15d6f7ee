"""In-memory implementation of the record store."""

import copy
import logging
from threading import RLock
from typing import Any, Dict, Optional, Sequence

from paylite.models.repositories import RecordStore


logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Keep every collection in a process-local dictionary.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._data: Dict[str, Any] = {}

    def read_key(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._data:
                return None
            return copy.deepcopy(self._data[key])

    def write_key(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove_keys(self, keys: Sequence[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)
