"""Local JSON-file implementation of the record store."""

import json
import logging
import os
from pathlib import Path
import tempfile
from threading import RLock
from typing import Any, Optional, Sequence

from paylite.models.exceptions import StorageError
from paylite.models.repositories import RecordStore


logger = logging.getLogger(__name__)


class JsonFileRecordStore(RecordStore):
    """Persist each key as `<data_dir>/<key>.json`."""

    def __init__(self, data_dir: str) -> None:
        """Initialize the store and create the data directory.

        Args:
            data_dir: Directory holding one JSON file per key.

        Raises:
            StorageError: If the directory cannot be created.
        """
        self._data_dir = Path(data_dir).expanduser().resolve()
        self._lock = RLock()
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Initialized JsonFileRecordStore data_dir=%s", self._data_dir)
        except OSError as exc:
            logger.exception("Failed to create data directory %s", self._data_dir)
            raise StorageError("Cannot create data directory {0}: {1}".format(self._data_dir, exc))

    @property
    def data_dir(self) -> str:
        """Return the resolved data directory."""
        return str(self._data_dir)

    def _path_for(self, key: str) -> Path:
        return self._data_dir / "{0}.json".format(key)

    def read_key(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        with self._lock:
            try:
                with path.open("r", encoding="utf-8") as handle:
                    return json.load(handle)
            except FileNotFoundError:
                return None
            except (OSError, ValueError) as exc:
                logger.exception("Failed to read key=%s path=%s", key, path)
                raise StorageError("Cannot read {0}: {1}".format(key, exc))

    def write_key(self, key: str, value: Any) -> None:
        """Write to a temp file in the same directory, then swap it in."""
        path = self._path_for(key)
        with self._lock:
            temp_name = None
            try:
                with tempfile.NamedTemporaryFile(
                    "w",
                    encoding="utf-8",
                    dir=str(self._data_dir),
                    prefix=".{0}.".format(key),
                    suffix=".tmp",
                    delete=False,
                ) as handle:
                    temp_name = handle.name
                    json.dump(value, handle, ensure_ascii=False)
                os.replace(temp_name, path)
            except (OSError, TypeError, ValueError) as exc:
                logger.exception("Failed to write key=%s path=%s", key, path)
                if temp_name is not None and os.path.exists(temp_name):
                    os.remove(temp_name)
                raise StorageError("Cannot write {0}: {1}".format(key, exc))

    def remove_keys(self, keys: Sequence[str]) -> None:
        with self._lock:
            for key in keys:
                try:
                    self._path_for(key).unlink()
                except FileNotFoundError:
                    continue
                except OSError as exc:
                    logger.exception("Failed to remove key=%s", key)
                    raise StorageError("Cannot remove {0}: {1}".format(key, exc))
