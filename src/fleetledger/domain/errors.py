"""Shared domain error messages and error types."""

from typing import Any, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``field`` and ``value`` name
    the offending input when there is one.
    """

    retryable = False

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class DuplicateError(ValidationError):
    """A unique name or code is already taken."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ReferentialIntegrityError(DomainError):
    """A referenced catalog entry does not exist or is disabled."""


class CrossReferenceError(DomainError):
    """Two supplied references are mutually inconsistent."""


class MonotonicityViolation(DomainError):
    """An odometer reading would move the ledger backwards."""


class CardNotActiveError(DomainError):
    """A movement was attempted on a card that is not active."""


class InsufficientBalanceError(DomainError):
    """A movement would breach the card's negative-balance policy."""


class ConflictError(DomainError):
    """A concurrent write was detected at commit time."""

    retryable = True


class StoreUnavailableError(DomainError):
    """The record store failed or timed out; the write may or may not have landed."""

    retryable = True


def not_found(kind: str, entity_id: int) -> str:
    """Return message for a missing entity."""
    return f"{kind} {entity_id} not found"


def blank_field(field: str) -> str:
    """Return message for a required text field left blank."""
    return f"{field} must not be blank"


def duplicate_name(kind: str, name: str) -> str:
    """Return message for a catalog name that already exists."""
    return f"{kind} with name '{name}' already exists"


def reference_missing(kind: str, entity_id: int) -> str:
    """Return message for a reference to a missing catalog entry."""
    return f"{kind} {entity_id} does not exist"


def reference_disabled(kind: str, entity_id: int) -> str:
    """Return message for a reference to a disabled catalog entry."""
    return f"{kind} {entity_id} is disabled"


def model_brand_mismatch(model_id: int, model_brand_id: int, brand_id: Optional[int]) -> str:
    """Return message when a model does not belong to the given brand."""
    return (
        f"Model {model_id} belongs to brand {model_brand_id}, "
        f"not brand {brand_id}"
    )


def odometer_regression(vehicle_id: int, value: int, latest_value: int) -> str:
    """Return message for an odometer reading below the current latest."""
    return (
        f"Odometer value {value} for vehicle {vehicle_id} is lower than "
        f"the latest reading {latest_value}"
    )


def card_not_active(card_id: int, status: str) -> str:
    """Return message for a movement on a non-active card."""
    return f"Card {card_id} is {status}; only active cards accept movements"


def insufficient_balance(card_id: int, balance: Any, amount: Any) -> str:
    """Return message when a debit would drive a card below zero."""
    return (
        f"Card {card_id} has balance {balance}; a debit of {amount} "
        "would make it negative"
    )


def concurrent_write(kind: str, key: int) -> str:
    """Return message when an optimistic version check fails."""
    return (
        f"Concurrent write detected on {kind} {key}; "
        "re-read the current state and retry"
    )


def store_unavailable(operation: str, reason: Any) -> str:
    """Return message when the record store fails."""
    return (
        f"Record store unavailable during {operation}: {reason}. "
        "The write may or may not have been applied; re-query before retrying"
    )
