"""Runtime configuration read from environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from fleetledger.domain.entities import OdometerOrdering
from fleetledger.domain.errors import ValidationError


@dataclass(frozen=True)
class FleetConfig:
    """Settings recognised by the fleetledger core."""

    db_path: Optional[str] = None
    stats_period_days: int = 30
    min_year: int = 1900
    max_year_ahead: int = 1
    currency: str = "MXN"
    odometer_ordering: OdometerOrdering = OdometerOrdering.INSERTION
    store_timeout: float = 5.0
    log_level: str = "INFO"


def _int_setting(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got '{raw}'", field=name, value=raw)
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {value}", field=name, value=value)
    return value


def load_config(env: Optional[Mapping[str, str]] = None) -> FleetConfig:
    """Build a FleetConfig from environment variables.

    Args:
        env: Mapping to read from. Defaults to os.environ.

    Returns:
        FleetConfig with defaults for unset variables

    Raises:
        ValidationError: If a variable holds an invalid value
    """
    if env is None:
        env = os.environ

    ordering_raw = env.get("FLEET_ODOMETER_ORDERING", OdometerOrdering.INSERTION.value)
    try:
        ordering = OdometerOrdering(ordering_raw.strip().lower())
    except ValueError:
        raise ValidationError(
            f"FLEET_ODOMETER_ORDERING must be 'insertion' or 'timestamp', got '{ordering_raw}'",
            field="FLEET_ODOMETER_ORDERING",
            value=ordering_raw,
        )

    timeout_raw = env.get("FLEET_STORE_TIMEOUT", "5")
    try:
        store_timeout = float(timeout_raw)
    except ValueError:
        raise ValidationError(
            f"FLEET_STORE_TIMEOUT must be a number, got '{timeout_raw}'",
            field="FLEET_STORE_TIMEOUT",
            value=timeout_raw,
        )

    return FleetConfig(
        db_path=env.get("FLEET_DB_PATH") or None,
        stats_period_days=_int_setting(env, "FLEET_STATS_PERIOD_DAYS", 30, minimum=1),
        min_year=_int_setting(env, "FLEET_MIN_YEAR", 1900),
        max_year_ahead=_int_setting(env, "FLEET_MAX_YEAR_AHEAD", 1),
        currency=env.get("FLEET_CURRENCY", "MXN").strip().upper() or "MXN",
        odometer_ordering=ordering,
        store_timeout=store_timeout,
        log_level=env.get("FLEET_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
