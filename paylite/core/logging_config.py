"""Central logging configuration for the PayLite application."""

import logging
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_log_level(level: Optional[Union[int, str]]) -> int:
    """Return a numeric level for an int or a level name such as `"debug"`."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level or "").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Optional[Union[int, str]] = logging.INFO) -> None:
    """Configure the root logger once; later calls keep the first setup."""
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """Create or retrieve a module logger."""
    return logging.getLogger(name)
