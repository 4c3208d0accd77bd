"""SQLAlchemy models for the fleetledger database."""

from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now():
    return datetime.now(UTC)


class Brand(Base):
    """Vehicle brand model."""

    __tablename__ = "brands"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    # Lower-cased, stripped name; backs case-insensitive uniqueness
    name_key = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    models = relationship("VehicleModel", back_populates="brand")


class VehicleType(Base):
    """Vehicle type model."""

    __tablename__ = "vehicle_types"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    name_key = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class VehicleModel(Base):
    """Vehicle model, owned by a brand and optionally typed."""

    __tablename__ = "vehicle_models"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    name_key = Column(String, nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    type_id = Column(Integer, ForeignKey("vehicle_types.id"), nullable=True)
    year = Column(Integer, nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("brand_id", "name_key", name="uq_model_brand_name"),)

    # Relationships
    brand = relationship("Brand", back_populates="models")


class Vehicle(Base):
    """Vehicle model."""

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    company_id = Column(String, nullable=False, index=True)
    plate = Column(String, nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)
    model_id = Column(Integer, ForeignKey("vehicle_models.id"), nullable=True)
    type_id = Column(Integer, ForeignKey("vehicle_types.id"), nullable=True)
    vin = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    color = Column(String, nullable=True)
    acquisition_date = Column(Date, nullable=True)
    cost = Column(Numeric(14, 2), nullable=True)
    mileage = Column(Integer, nullable=True)
    odometer_unit = Column(String, default="km", nullable=False)
    status = Column(String, default="active", nullable=False)
    condition = Column(String, default="new", nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class OdometerReading(Base):
    """Append-only odometer reading."""

    __tablename__ = "odometer_readings"

    id = Column(Integer, primary_key=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    value = Column(Integer, nullable=False)
    source = Column(String, default="manual", nullable=False)
    at = Column(DateTime, nullable=False)
    note = Column(String, nullable=True)
    sequence = Column(Integer, nullable=False)

    # Two writers holding the same head sequence collide here
    __table_args__ = (UniqueConstraint("vehicle_id", "sequence", name="uq_reading_vehicle_sequence"),)


class OdometerHead(Base):
    """Cached latest-reading projection per vehicle."""

    __tablename__ = "odometer_heads"

    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), primary_key=True)
    latest_reading_id = Column(Integer, ForeignKey("odometer_readings.id"), nullable=True)
    latest_value = Column(Integer, nullable=True)
    sequence = Column(Integer, default=0, nullable=False)


class RechargeCard(Base):
    """Recharge card with its cached balance projection."""

    __tablename__ = "recharge_cards"

    id = Column(Integer, primary_key=True)
    company_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    provider = Column(String, default="other", nullable=False)
    status = Column(String, default="active", nullable=False)
    allow_negative = Column(Boolean, default=False, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    balance = Column(Numeric(14, 2), default=Decimal("0"), nullable=False)
    movement_count = Column(Integer, default=0, nullable=False)
    last_movement_id = Column(Integer, nullable=True)
    version = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "code", name="uq_card_company_code"),)

    # Relationships
    movements = relationship("RechargeMovement", back_populates="card")


class RechargeMovement(Base):
    """Append-only card movement."""

    __tablename__ = "recharge_movements"

    id = Column(Integer, primary_key=True)
    card_id = Column(Integer, ForeignKey("recharge_cards.id"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String, nullable=False)
    at = Column(DateTime, nullable=False)
    reference = Column(String, nullable=True)
    note = Column(String, nullable=True)
    sequence = Column(Integer, nullable=False)

    __table_args__ = (UniqueConstraint("card_id", "sequence", name="uq_movement_card_sequence"),)

    # Relationships
    card = relationship("RechargeCard", back_populates="movements")


def create_session_factory(database_url: str, timeout: float = 5.0) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"timeout": timeout, "check_same_thread": False}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
