"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, UTC
from decimal import Decimal

from fleetledger.domain.entities import (
    Brand,
    CardStatus,
    MovementType,
    OdometerReading,
    ReadingSource,
    RechargeMovement,
    VehicleStatus,
)


def _movement(amount: str, type: MovementType) -> RechargeMovement:
    return RechargeMovement(
        id=1,
        card_id=1,
        amount=Decimal(amount),
        type=type,
        at=datetime.now(UTC),
        reference=None,
        note=None,
        sequence=1,
    )


class TestEntities:
    """Tests for entity behaviour."""

    def test_brand_is_immutable(self):
        brand = Brand(id=1, name="Toyota", description=None, enabled=True, created_at=datetime.now(UTC))
        with pytest.raises(FrozenInstanceError):
            brand.name = "Lexus"

    def test_reading_is_immutable(self):
        reading = OdometerReading(
            id=1,
            vehicle_id=1,
            value=100,
            source=ReadingSource.MANUAL,
            at=datetime.now(UTC),
            note=None,
            sequence=1,
        )
        with pytest.raises(FrozenInstanceError):
            reading.value = 50

    def test_signed_amount(self):
        assert _movement("10.50", MovementType.CREDIT).signed_amount == Decimal("10.50")
        assert _movement("10.50", MovementType.DEBIT).signed_amount == Decimal("-10.50")

    def test_enums_compare_to_strings(self):
        assert VehicleStatus.ACTIVE == "active"
        assert CardStatus("lost") is CardStatus.LOST
