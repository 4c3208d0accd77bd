"""Domain model entities for fleetledger.

These are pure data classes representing business concepts, independent of
database schema. Records returned by the store are always converted into
these entities before they reach a service or a caller.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class CatalogKind(str, Enum):
    """Kinds of catalog entries."""

    BRAND = "brand"
    TYPE = "type"
    MODEL = "model"


class OdometerUnit(str, Enum):
    KM = "km"
    MI = "mi"


class VehicleStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"
    SOLD = "sold"


class VehicleCondition(str, Enum):
    NEW = "new"
    SEMI_NEW = "semi_new"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    FOR_SALE = "for_sale"
    RENTED = "rented"


class ReadingSource(str, Enum):
    MANUAL = "manual"
    TRIP = "trip"
    SERVICE = "service"


class CardProvider(str, Enum):
    PARKIA = "parkia"
    RFID = "rfid"
    OTHER = "other"


class CardStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"
    LOST = "lost"


class MovementType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class OdometerOrdering(str, Enum):
    """Which order the monotonicity check follows."""

    INSERTION = "insertion"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class Brand:
    """Vehicle brand catalog entry."""

    id: int
    name: str
    description: Optional[str]
    enabled: bool
    created_at: datetime


@dataclass(frozen=True)
class VehicleType:
    """Vehicle type catalog entry."""

    id: int
    name: str
    description: str
    enabled: bool
    created_at: datetime


@dataclass(frozen=True)
class VehicleModel:
    """Vehicle model catalog entry, always owned by a brand."""

    id: int
    name: str
    brand_id: int
    type_id: Optional[int]
    year: Optional[int]
    enabled: bool
    created_at: datetime


CatalogEntry = Brand | VehicleType | VehicleModel


@dataclass(frozen=True)
class Vehicle:
    """Vehicle domain entity."""

    id: int
    company_id: str
    plate: str
    brand_id: Optional[int]
    model_id: Optional[int]
    type_id: Optional[int]
    vin: Optional[str]
    year: Optional[int]
    color: Optional[str]
    acquisition_date: Optional[date]
    cost: Optional[Decimal]
    mileage: Optional[int]
    odometer_unit: OdometerUnit
    status: VehicleStatus
    condition: VehicleCondition
    enabled: bool
    created_at: datetime


@dataclass(frozen=True)
class OdometerReading:
    """Odometer reading; immutable once appended."""

    id: int
    vehicle_id: int
    value: int
    source: ReadingSource
    at: datetime
    note: Optional[str]
    sequence: int


@dataclass(frozen=True)
class RechargeCard:
    """Prepaid toll/fuel card with its cached balance projection."""

    id: int
    company_id: str
    code: str
    provider: CardProvider
    status: CardStatus
    allow_negative: bool
    enabled: bool
    balance: Decimal
    movement_count: int
    version: int
    created_at: datetime


@dataclass(frozen=True)
class RechargeMovement:
    """Card movement; immutable once appended."""

    id: int
    card_id: int
    amount: Decimal
    type: MovementType
    at: datetime
    reference: Optional[str]
    note: Optional[str]
    sequence: int

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign it contributes to the balance."""
        return self.amount if self.type == MovementType.CREDIT else -self.amount


@dataclass(frozen=True)
class FleetStats:
    """Fleet-level aggregate over a vehicle collection."""

    total: int
    by_status: dict[VehicleStatus, int] = field(default_factory=dict)
    active_percentage: int = 0


@dataclass(frozen=True)
class OdometerStats:
    """Distance and usage statistics over a time window."""

    period: int
    total_distance: int
    average_daily: float
    readings_count: int
    first_reading: Optional[int] = None
    last_reading: Optional[int] = None


@dataclass(frozen=True)
class CardBalance:
    """Balance view of a recharge card."""

    balance: Decimal
    currency: str
    last_movement: Optional[RechargeMovement]
    total_movements: int


@dataclass(frozen=True)
class CardStats:
    """Status breakdown over a card collection."""

    total: int
    active: int
    blocked: int
    lost: int
    active_percentage: int
