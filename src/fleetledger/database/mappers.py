"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enum columns are stored as plain
strings and timestamps as naive UTC, and both are restored here.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from fleetledger.domain import entities as domain
from fleetledger.database.models import (
    Brand as ORMBrand,
    VehicleType as ORMVehicleType,
    VehicleModel as ORMVehicleModel,
    Vehicle as ORMVehicle,
    OdometerReading as ORMOdometerReading,
    RechargeCard as ORMRechargeCard,
    RechargeMovement as ORMRechargeMovement,
)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_storage(value: datetime) -> datetime:
    """Convert a timestamp to the naive-UTC form stored in the database."""
    return to_utc(value).replace(tzinfo=None)


def brand_to_domain(orm_brand: ORMBrand) -> domain.Brand:
    """Convert SQLAlchemy Brand model to domain Brand entity."""
    return domain.Brand(
        id=orm_brand.id,
        name=orm_brand.name,
        description=orm_brand.description,
        enabled=orm_brand.enabled,
        created_at=to_utc(orm_brand.created_at),
    )


def vehicle_type_to_domain(orm_type: ORMVehicleType) -> domain.VehicleType:
    """Convert SQLAlchemy VehicleType model to domain VehicleType entity."""
    return domain.VehicleType(
        id=orm_type.id,
        name=orm_type.name,
        description=orm_type.description,
        enabled=orm_type.enabled,
        created_at=to_utc(orm_type.created_at),
    )


def vehicle_model_to_domain(orm_model: ORMVehicleModel) -> domain.VehicleModel:
    """Convert SQLAlchemy VehicleModel model to domain VehicleModel entity."""
    return domain.VehicleModel(
        id=orm_model.id,
        name=orm_model.name,
        brand_id=orm_model.brand_id,
        type_id=orm_model.type_id,
        year=orm_model.year,
        enabled=orm_model.enabled,
        created_at=to_utc(orm_model.created_at),
    )


def vehicle_to_domain(orm_vehicle: ORMVehicle) -> domain.Vehicle:
    """Convert SQLAlchemy Vehicle model to domain Vehicle entity."""
    return domain.Vehicle(
        id=orm_vehicle.id,
        company_id=orm_vehicle.company_id,
        plate=orm_vehicle.plate,
        brand_id=orm_vehicle.brand_id,
        model_id=orm_vehicle.model_id,
        type_id=orm_vehicle.type_id,
        vin=orm_vehicle.vin,
        year=orm_vehicle.year,
        color=orm_vehicle.color,
        acquisition_date=orm_vehicle.acquisition_date,
        cost=orm_vehicle.cost,
        mileage=orm_vehicle.mileage,
        odometer_unit=domain.OdometerUnit(orm_vehicle.odometer_unit),
        status=domain.VehicleStatus(orm_vehicle.status),
        condition=domain.VehicleCondition(orm_vehicle.condition),
        enabled=orm_vehicle.enabled,
        created_at=to_utc(orm_vehicle.created_at),
    )


def odometer_reading_to_domain(orm_reading: ORMOdometerReading) -> domain.OdometerReading:
    """Convert SQLAlchemy OdometerReading model to domain OdometerReading entity."""
    return domain.OdometerReading(
        id=orm_reading.id,
        vehicle_id=orm_reading.vehicle_id,
        value=orm_reading.value,
        source=domain.ReadingSource(orm_reading.source),
        at=to_utc(orm_reading.at),
        note=orm_reading.note,
        sequence=orm_reading.sequence,
    )


def recharge_card_to_domain(orm_card: ORMRechargeCard) -> domain.RechargeCard:
    """Convert SQLAlchemy RechargeCard model to domain RechargeCard entity."""
    return domain.RechargeCard(
        id=orm_card.id,
        company_id=orm_card.company_id,
        code=orm_card.code,
        provider=domain.CardProvider(orm_card.provider),
        status=domain.CardStatus(orm_card.status),
        allow_negative=orm_card.allow_negative,
        enabled=orm_card.enabled,
        balance=Decimal(orm_card.balance),
        movement_count=orm_card.movement_count,
        version=orm_card.version,
        created_at=to_utc(orm_card.created_at),
    )


def recharge_movement_to_domain(orm_movement: ORMRechargeMovement) -> domain.RechargeMovement:
    """Convert SQLAlchemy RechargeMovement model to domain RechargeMovement entity."""
    return domain.RechargeMovement(
        id=orm_movement.id,
        card_id=orm_movement.card_id,
        amount=Decimal(orm_movement.amount),
        type=domain.MovementType(orm_movement.type),
        at=to_utc(orm_movement.at),
        reference=orm_movement.reference,
        note=orm_movement.note,
        sequence=orm_movement.sequence,
    )
