"""Recharge card ledger domain service.

A card's balance is the signed sum of its movements. The card row caches
that sum together with a version stamp. Every append re-derives the
projected balance from the cached value read at the start, and the store
accepts the write only if the version has not moved since.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from fleetledger.config import FleetConfig
from fleetledger.database.base import Database
from fleetledger.domain.entities import (
    CardBalance,
    CardProvider,
    CardStats,
    CardStatus,
    MovementType,
    RechargeCard,
    RechargeMovement,
)
from fleetledger.domain.errors import (
    CardNotActiveError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
    card_not_active,
    insufficient_balance,
    not_found,
)
from fleetledger.domain.validation import (
    coerce_enum,
    optional_text,
    require_text,
    to_decimal,
    validate_timestamp,
)
from fleetledger.domain.vehicle import percentage
from fleetledger.utils.logger import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = {"code", "provider", "status", "allow_negative", "enabled"}
CENT = Decimal("0.01")
# Largest magnitude the Numeric(14, 2) columns hold without rounding.
MAX_AMOUNT = Decimal("999999999999.99")


def replay_balance(movements: Iterable[RechargeMovement]) -> Decimal:
    """Signed sum of a card's movements."""
    return sum((m.signed_amount for m in movements), Decimal("0"))


class RechargeCardService:
    """Service for managing recharge cards and their movements."""

    def __init__(self, db: Database, config: Optional[FleetConfig] = None):
        """Initialize recharge card service.

        Args:
            db: Database instance
            config: Settings; supplies the balance currency
        """
        self.db = db
        self.config = config or FleetConfig()

    def create_card(
        self,
        company_id: str,
        code: str,
        provider: CardProvider | str = CardProvider.OTHER,
        status: CardStatus | str = CardStatus.ACTIVE,
        allow_negative: bool = False,
    ) -> RechargeCard:
        """Create a card with a zero balance.

        Raises:
            ValidationError: If company_id or code is blank, or an enum is invalid
            DuplicateError: If the company already has a card with this code
        """
        company_id = require_text(company_id, "company_id")
        code = require_text(code, "code")
        provider = coerce_enum(CardProvider, provider, "provider")
        status = coerce_enum(CardStatus, status, "status")
        card_id = self.db.create_card(
            company_id=company_id,
            code=code,
            provider=provider,
            status=status,
            allow_negative=bool(allow_negative),
        )
        logger.info("Created card %s code '%s' for company %s", card_id, code, company_id)
        return self.get_card(card_id)

    def get_card(self, card_id: int) -> RechargeCard:
        """Get card by ID.

        Raises:
            NotFoundError: If the card does not exist
        """
        card = self.db.get_card(card_id)
        if card is None:
            raise NotFoundError(not_found("Card", card_id), field="card_id", value=card_id)
        return card

    def get_by_code(self, code: str, company_id: Optional[str] = None) -> Optional[RechargeCard]:
        """Find an enabled card by its code."""
        return self.db.find_card_by_code(code.strip(), company_id=company_id)

    def list_cards(
        self,
        company_id: Optional[str] = None,
        status: Optional[CardStatus | str] = None,
        provider: Optional[CardProvider | str] = None,
        include_disabled: bool = False,
    ) -> list[RechargeCard]:
        """List cards with optional filters."""
        if status is not None:
            status = coerce_enum(CardStatus, status, "status")
        if provider is not None:
            provider = coerce_enum(CardProvider, provider, "provider")
        return self.db.list_cards(
            company_id=company_id,
            status=status,
            provider=provider,
            include_disabled=include_disabled,
        )

    def update_card(self, card_id: int, **patch: Any) -> RechargeCard:
        """Change a card's code, provider, status, negative-balance policy or enabled flag.

        The balance projection cannot be patched; it only moves through
        movements or a rebuild.
        """
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(f"Card field '{field}' cannot be updated", field=field)
        fields = dict(patch)
        if "code" in fields:
            fields["code"] = require_text(fields["code"], "code")
        if "provider" in fields:
            fields["provider"] = coerce_enum(CardProvider, fields["provider"], "provider")
        if "status" in fields:
            fields["status"] = coerce_enum(CardStatus, fields["status"], "status")
        for flag in ("allow_negative", "enabled"):
            if flag in fields:
                fields[flag] = bool(fields[flag])

        self.get_card(card_id)
        if fields:
            self.db.update_card(card_id, **fields)
            logger.info("Updated card %s fields %s", card_id, sorted(fields))
        return self.get_card(card_id)

    def disable_card(self, card_id: int) -> RechargeCard:
        """Disable a card; it is also blocked so it accepts no movements."""
        return self.update_card(card_id, enabled=False, status=CardStatus.BLOCKED)

    def add_movement(
        self,
        card_id: int,
        amount: Decimal | int | str,
        type: MovementType | str,
        at: Optional[datetime] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> RechargeMovement:
        """Append a credit or debit to a card.

        Args:
            card_id: Card ID
            amount: Positive amount
            type: credit or debit
            at: When the movement happened (defaults to now; naive means UTC)
            reference: Optional external reference
            note: Optional note

        Returns:
            Stored movement

        Raises:
            NotFoundError: If the card does not exist
            ValidationError: If amount is not positive, is out of range, or type/at
                is malformed
            CardNotActiveError: If the card is blocked or lost
            InsufficientBalanceError: If the movement would make the balance
                negative on a card that does not allow it
            ConflictError: If the card changed concurrently
            StoreUnavailableError: If the store failed
        """
        amount = to_decimal(amount, "amount")
        if amount <= 0:
            raise ValidationError(f"amount must be positive, got {amount}", field="amount", value=amount)
        if amount != amount.quantize(CENT):
            raise ValidationError(
                f"amount must have at most two decimal places, got {amount}", field="amount", value=amount
            )
        if amount > MAX_AMOUNT:
            raise ValidationError(
                f"amount must not exceed {MAX_AMOUNT}, got {amount}", field="amount", value=amount
            )
        type = coerce_enum(MovementType, type, "type")
        at = validate_timestamp(at)

        card = self.get_card(card_id)
        if card.status != CardStatus.ACTIVE:
            logger.warning("Rejected movement on card %s: status %s", card_id, card.status.value)
            raise CardNotActiveError(
                card_not_active(card_id, card.status.value), field="status", value=card.status.value
            )

        delta = amount if type == MovementType.CREDIT else -amount
        projected = card.balance + delta
        if abs(projected) > MAX_AMOUNT:
            raise ValidationError(
                f"balance of card {card_id} would exceed {MAX_AMOUNT} after this movement",
                field="amount",
                value=amount,
            )
        if projected < 0 and not card.allow_negative:
            logger.warning(
                "Rejected %s of %s on card %s: balance %s", type.value, amount, card_id, card.balance
            )
            raise InsufficientBalanceError(
                insufficient_balance(card_id, card.balance, amount), field="amount", value=amount
            )

        movement = self.db.append_movement(
            card_id,
            expected_version=card.version,
            sequence=card.movement_count + 1,
            amount=amount,
            type=type,
            at=at,
            new_balance=projected,
            reference=optional_text(reference),
            note=optional_text(note),
        )
        logger.info(
            "Recorded %s of %s on card %s; balance %s", type.value, amount, card_id, projected
        )
        return movement

    def top_up(self, card_id: int, amount: Decimal | int | str, **kwargs: Any) -> RechargeMovement:
        """Credit a card."""
        return self.add_movement(card_id, amount, MovementType.CREDIT, **kwargs)

    def spend(self, card_id: int, amount: Decimal | int | str, **kwargs: Any) -> RechargeMovement:
        """Debit a card."""
        return self.add_movement(card_id, amount, MovementType.DEBIT, **kwargs)

    def get_balance(self, card_id: int) -> CardBalance:
        """Read the cached balance of a card."""
        card = self.get_card(card_id)
        return CardBalance(
            balance=card.balance,
            currency=self.config.currency,
            last_movement=self.db.get_last_movement(card_id),
            total_movements=card.movement_count,
        )

    def movements(
        self,
        card_id: int,
        type: Optional[MovementType | str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RechargeMovement]:
        """List movements newest first."""
        if type is not None:
            type = coerce_enum(MovementType, type, "type")
        return self.db.list_movements(card_id, type=type, limit=limit, offset=offset)

    def replay_balance(self, card_id: int) -> Decimal:
        """Recompute the balance from the card's full movement log."""
        self.get_card(card_id)
        return replay_balance(self.db.list_movements(card_id, descending=False))

    def rebuild_balance(self, card_id: int) -> Decimal:
        """Rewrite the cached balance from a full replay.

        Raises:
            ConflictError: If the card changed during the rebuild
        """
        card = self.get_card(card_id)
        movements: Sequence[RechargeMovement] = self.db.list_movements(card_id, descending=False)
        balance = replay_balance(movements)
        self.db.rebuild_card_balance(
            card_id,
            expected_version=card.version,
            balance=balance,
            movement_count=len(movements),
            last_movement_id=movements[-1].id if movements else None,
        )
        if balance != card.balance:
            logger.warning(
                "Card %s cached balance %s differed from replay %s", card_id, card.balance, balance
            )
        return balance

    @staticmethod
    def compute_card_stats(cards: Iterable[RechargeCard]) -> CardStats:
        """Aggregate a card collection by status."""
        counts = {status: 0 for status in CardStatus}
        total = 0
        for card in cards:
            total += 1
            counts[card.status] += 1
        return CardStats(
            total=total,
            active=counts[CardStatus.ACTIVE],
            blocked=counts[CardStatus.BLOCKED],
            lost=counts[CardStatus.LOST],
            active_percentage=percentage(counts[CardStatus.ACTIVE], total),
        )
