"""Configuration loading utilities for YAML-based application settings."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from paylite.common.loan_math import (
    INTEREST_RATE,
    MAX_LOAN_AMOUNT,
    MAX_TERM_MONTHS,
    MIN_LOAN_AMOUNT,
    MIN_SUCCESSFUL_PAYMENTS,
    MIN_TERM_MONTHS,
)
from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"

DEFAULT_STATUS_WEIGHTS: Dict[str, float] = {"Success": 70.0, "Failed": 20.0, "Pending": 10.0}


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from YAML configuration file."""

    app_name: str = "PayLite+Loans"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    storage_backend: str = "memory"
    storage_data_dir: str = ".paylite_data"
    payment_status_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_STATUS_WEIGHTS))
    payment_processing_delay_sec: float = 1.0
    loan_interest_rate: float = float(INTEREST_RATE)
    loan_min_successful_payments: int = MIN_SUCCESSFUL_PAYMENTS
    loan_min_amount: float = float(MIN_LOAN_AMOUNT)
    loan_max_amount: float = float(MAX_LOAN_AMOUNT)
    loan_min_term_months: int = MIN_TERM_MONTHS
    loan_max_term_months: int = MAX_TERM_MONTHS
    loan_term_options: List[int] = field(default_factory=list)
    loan_ineligible_status: str = "Pending"
    loan_processing_delay_sec: float = 1.0
    auth_token_ttl_hours: int = 24
    auth_pbkdf2_iterations: int = 260000
    auth_min_password_length: int = 6
    auth_demo_email: str = "demo@paylite.com"
    auth_demo_password: str = "demo123"
    auth_demo_name: str = "Demo User"


def _to_bool(value: Any, default: bool = False) -> bool:
    """Convert value to bool with a default fallback."""
    try:
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {"1", "true", "yes", "on"}
    except (AttributeError, ValueError):
        logger.warning("Invalid boolean value '%s'. Using default=%s", value, default)
        return default


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _to_float(value: Any, default: float) -> float:
    """Convert value to float with a default fallback."""
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid float value '%s'. Using default=%s", value, default)
        return default


def _to_int_list(value: Any) -> List[int]:
    """Convert list-like or comma-separated value to a sorted unique list[int]."""
    if value is None:
        return []
    items = value if isinstance(value, list) else str(value).split(",")
    result = set()
    for item in items:
        text = str(item).strip()
        if not text:
            continue
        try:
            result.add(int(text))
        except ValueError:
            logger.warning("Ignoring invalid term option '%s'.", text)
    return sorted(result)


def _to_weights(value: Any) -> Dict[str, float]:
    """Convert a status->weight mapping, dropping non-positive entries."""
    if not isinstance(value, dict) or not value:
        return dict(DEFAULT_STATUS_WEIGHTS)
    weights: Dict[str, float] = {}
    for status, raw in value.items():
        weight = _to_float(raw, 0.0)
        if weight <= 0:
            logger.warning("Ignoring non-positive payment weight status=%s weight=%s", status, raw)
            continue
        weights[str(status).strip()] = weight
    if not weights:
        logger.warning("No usable payment weights configured. Using defaults.")
        return dict(DEFAULT_STATUS_WEIGHTS)
    return weights


def _read_config(path: Optional[Path] = None) -> dict:
    """Read and parse YAML configuration."""
    config_path = path or _CONFIG_PATH
    try:
        with config_path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        logger.info("Configuration loaded from %s", config_path)
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", config_path)
        return {}
    except Exception:
        logger.exception("Failed to load config file from %s", config_path)
        return {}


def get_env(key: str, default: Optional[str] = None, config_path: Optional[str] = None) -> Optional[str]:
    """Read a single config value using dot-notation keys, e.g. `loans.interest_rate`."""
    try:
        current: Any = _read_config(Path(config_path) if config_path else None)
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        if current is None:
            return default
        return str(current)
    except Exception:
        logger.exception("Failed to read config key '%s'.", key)
        return default


def build_settings(config: Dict[str, Any]) -> AppSettings:
    """Build validated settings from an already parsed config mapping."""
    defaults = AppSettings()
    app_cfg = config.get("app") or {}
    storage_cfg = config.get("storage") or {}
    payments_cfg = config.get("payments") or {}
    loans_cfg = config.get("loans") or {}
    auth_cfg = config.get("auth") or {}

    ineligible_status = str(loans_cfg.get("ineligible_status", defaults.loan_ineligible_status)).strip().capitalize()
    if ineligible_status not in {"Pending", "Rejected"}:
        logger.warning("Invalid loans.ineligible_status '%s'. Using Pending.", ineligible_status)
        ineligible_status = "Pending"

    storage_backend = str(storage_cfg.get("backend", defaults.storage_backend)).strip().lower()
    if storage_backend not in {"memory", "json"}:
        logger.warning("Unknown storage backend '%s'. Using memory.", storage_backend)
        storage_backend = "memory"

    return AppSettings(
        app_name=str(app_cfg.get("name", defaults.app_name)),
        debug=_to_bool(app_cfg.get("debug", defaults.debug), defaults.debug),
        host=str(app_cfg.get("host", defaults.host)),
        port=_to_int(app_cfg.get("port", defaults.port), defaults.port),
        storage_backend=storage_backend,
        storage_data_dir=str(storage_cfg.get("data_dir", defaults.storage_data_dir)),
        payment_status_weights=_to_weights(payments_cfg.get("status_weights")),
        payment_processing_delay_sec=max(
            0.0,
            _to_float(
                payments_cfg.get("processing_delay_sec", defaults.payment_processing_delay_sec),
                defaults.payment_processing_delay_sec,
            ),
        ),
        loan_interest_rate=_to_float(loans_cfg.get("interest_rate", defaults.loan_interest_rate), defaults.loan_interest_rate),
        loan_min_successful_payments=_to_int(
            loans_cfg.get("min_successful_payments", defaults.loan_min_successful_payments),
            defaults.loan_min_successful_payments,
        ),
        loan_min_amount=_to_float(loans_cfg.get("min_amount", defaults.loan_min_amount), defaults.loan_min_amount),
        loan_max_amount=_to_float(loans_cfg.get("max_amount", defaults.loan_max_amount), defaults.loan_max_amount),
        loan_min_term_months=_to_int(
            loans_cfg.get("min_term_months", defaults.loan_min_term_months),
            defaults.loan_min_term_months,
        ),
        loan_max_term_months=_to_int(
            loans_cfg.get("max_term_months", defaults.loan_max_term_months),
            defaults.loan_max_term_months,
        ),
        loan_term_options=_to_int_list(loans_cfg.get("term_options")),
        loan_ineligible_status=ineligible_status,
        loan_processing_delay_sec=max(
            0.0,
            _to_float(
                loans_cfg.get("processing_delay_sec", defaults.loan_processing_delay_sec),
                defaults.loan_processing_delay_sec,
            ),
        ),
        auth_token_ttl_hours=_to_int(auth_cfg.get("token_ttl_hours", defaults.auth_token_ttl_hours), defaults.auth_token_ttl_hours),
        auth_pbkdf2_iterations=_to_int(
            auth_cfg.get("pbkdf2_iterations", defaults.auth_pbkdf2_iterations),
            defaults.auth_pbkdf2_iterations,
        ),
        auth_min_password_length=_to_int(
            auth_cfg.get("min_password_length", defaults.auth_min_password_length),
            defaults.auth_min_password_length,
        ),
        auth_demo_email=str(auth_cfg.get("demo_email", defaults.auth_demo_email)),
        auth_demo_password=str(auth_cfg.get("demo_password", defaults.auth_demo_password)),
        auth_demo_name=str(auth_cfg.get("demo_name", defaults.auth_demo_name)),
    )


def load_settings(config_path: Optional[str] = None) -> AppSettings:
    """Load and validate application settings from `config.yml`."""
    config = _read_config(Path(config_path) if config_path else None)
    return build_settings(config)
