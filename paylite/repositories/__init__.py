"""Record store implementations."""

import logging

from paylite.core.config import AppSettings
from paylite.models.repositories import RecordStore
from .json_record_store import JsonFileRecordStore
from .memory_record_store import InMemoryRecordStore


logger = logging.getLogger(__name__)


def build_record_store(settings: AppSettings) -> RecordStore:
    """Create the record store selected by `storage.backend`."""
    if settings.storage_backend == "json":
        return JsonFileRecordStore(settings.storage_data_dir)
    logger.info("Using in-memory record store; data is lost on restart.")
    return InMemoryRecordStore()


__all__ = [
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "build_record_store",
]
