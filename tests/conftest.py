"""Shared pytest fixtures for fleetledger tests."""

import tempfile
import os
from datetime import datetime, UTC
import pytest

from fleetledger.config import FleetConfig
from fleetledger.database.factories import create_sqlite_database
from fleetledger.domain.catalog import CatalogService
from fleetledger.domain.entities import OdometerOrdering
from fleetledger.domain.odometer import OdometerService
from fleetledger.domain.recharge import RechargeCardService
from fleetledger.domain.vehicle import VehicleService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def config():
    """Default settings."""
    return FleetConfig()


@pytest.fixture
def catalog_service(temp_db, config):
    """Create a CatalogService with a temporary database."""
    return CatalogService(temp_db, config)


@pytest.fixture
def vehicle_service(temp_db, config):
    """Create a VehicleService with a temporary database."""
    return VehicleService(temp_db, config)


@pytest.fixture
def odometer_service(temp_db, config):
    """Create an OdometerService with a temporary database."""
    return OdometerService(temp_db, config)


@pytest.fixture
def timestamp_odometer_service(temp_db):
    """OdometerService that orders readings by their timestamp."""
    return OdometerService(temp_db, FleetConfig(odometer_ordering=OdometerOrdering.TIMESTAMP))


@pytest.fixture
def card_service(temp_db, config):
    """Create a RechargeCardService with a temporary database."""
    return RechargeCardService(temp_db, config)


@pytest.fixture
def sample_brand(catalog_service):
    """Create a sample brand."""
    return catalog_service.create_brand("Toyota")


@pytest.fixture
def sample_type(catalog_service):
    """Create a sample vehicle type."""
    return catalog_service.create_type("Pickup", "Light truck")


@pytest.fixture
def sample_model(catalog_service, sample_brand, sample_type):
    """Create a sample model under the sample brand."""
    return catalog_service.create_model("Hilux", sample_brand.id, type_id=sample_type.id, year=2022)


@pytest.fixture
def sample_vehicle(vehicle_service, sample_brand, sample_model):
    """Create a sample vehicle."""
    return vehicle_service.create_vehicle(
        "acme", "ABC-123", brand_id=sample_brand.id, model_id=sample_model.id
    )


@pytest.fixture
def sample_card(card_service):
    """Create a sample active card that does not allow negative balances."""
    return card_service.create_card("acme", "TAG-0001")


@pytest.fixture
def now():
    """A fixed reference timestamp."""
    return datetime(2024, 6, 30, 12, 0, tzinfo=UTC)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
