"""Field validation helpers shared by the domain services."""

from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, TypeVar

from fleetledger.domain.errors import ValidationError, blank_field

E = TypeVar("E", bound=Enum)


def require_text(value: Optional[str], field: str) -> str:
    """Return the stripped text, or raise if it is missing or blank."""
    if value is None or not str(value).strip():
        raise ValidationError(blank_field(field), field=field, value=value)
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip optional text, mapping blank to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def coerce_enum(enum_cls: type[E], value: Any, field: str) -> E:
    """Convert a string or member into ``enum_cls``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"{field} must be one of: {allowed}; got '{value}'", field=field, value=value
        )


def validate_year(value: Any, min_year: int, max_year_ahead: int, field: str = "year") -> Optional[int]:
    """Check a year against the [min_year, current year + max_year_ahead] window."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer, got {value!r}", field=field, value=value)
    max_year = date.today().year + max_year_ahead
    if value < min_year or value > max_year:
        raise ValidationError(
            f"{field} must be between {min_year} and {max_year}, got {value}",
            field=field,
            value=value,
        )
    return value


def validate_non_negative_int(value: Any, field: str) -> int:
    """Check for an integer >= 0 (bool is not accepted)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer, got {value!r}", field=field, value=value)
    if value < 0:
        raise ValidationError(f"{field} must not be negative, got {value}", field=field, value=value)
    return value


def to_decimal(value: Any, field: str) -> Decimal:
    """Convert to a finite Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field, value=value)
    try:
        # str() keeps floats from dragging binary noise into the ledger
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field, value=value)
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}", field=field, value=value)
    return amount


def validate_timestamp(value: Optional[datetime], field: str = "at") -> datetime:
    """Default to now and normalise to an aware UTC timestamp."""
    if value is None:
        return datetime.now(UTC)
    if not isinstance(value, datetime):
        raise ValidationError(f"{field} must be a datetime, got {value!r}", field=field, value=value)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
