"""Tests for VehicleService."""

from datetime import date
from decimal import Decimal

import pytest

from fleetledger.domain.entities import (
    CatalogKind,
    OdometerUnit,
    Vehicle,
    VehicleCondition,
    VehicleStatus,
)
from fleetledger.domain.errors import (
    CrossReferenceError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from fleetledger.domain.vehicle import VehicleService, percentage


class TestCreateVehicle:
    """Tests for creating vehicles."""

    def test_create_minimal(self, vehicle_service):
        vehicle = vehicle_service.create_vehicle("acme", "ABC-123")
        assert isinstance(vehicle, Vehicle)
        assert vehicle.plate == "ABC-123"
        assert vehicle.odometer_unit == OdometerUnit.KM
        assert vehicle.status == VehicleStatus.ACTIVE
        assert vehicle.condition == VehicleCondition.NEW
        assert vehicle.enabled is True

    def test_create_full(self, vehicle_service, sample_brand, sample_model, sample_type):
        vehicle = vehicle_service.create_vehicle(
            "acme",
            "XYZ-987",
            brand_id=sample_brand.id,
            model_id=sample_model.id,
            type_id=sample_type.id,
            vin="1HGCM82633A004352",
            year=2021,
            color="White",
            acquisition_date=date(2021, 3, 15),
            cost="350000.00",
            mileage=1200,
            odometer_unit="mi",
            status="maintenance",
            condition="semi_new",
        )
        assert vehicle.cost == Decimal("350000.00")
        assert vehicle.acquisition_date == date(2021, 3, 15)
        assert vehicle.odometer_unit == OdometerUnit.MI
        assert vehicle.status == VehicleStatus.MAINTENANCE
        assert vehicle.condition == VehicleCondition.SEMI_NEW

    def test_blank_plate(self, vehicle_service):
        with pytest.raises(ValidationError) as excinfo:
            vehicle_service.create_vehicle("acme", " ")
        assert excinfo.value.field == "plate"

    def test_unknown_field(self, vehicle_service):
        with pytest.raises(ValidationError):
            vehicle_service.create_vehicle("acme", "ABC-123", wheels=4)

    def test_invalid_status(self, vehicle_service):
        with pytest.raises(ValidationError) as excinfo:
            vehicle_service.create_vehicle("acme", "ABC-123", status="flying")
        assert excinfo.value.field == "status"

    @pytest.mark.parametrize("year", [1899, date.today().year + 2])
    def test_year_outside_window(self, vehicle_service, year):
        with pytest.raises(ValidationError) as excinfo:
            vehicle_service.create_vehicle("acme", "ABC-123", year=year)
        assert excinfo.value.field == "year"

    @pytest.mark.parametrize("year", [1900, date.today().year + 1])
    def test_year_window_bounds(self, vehicle_service, year):
        vehicle = vehicle_service.create_vehicle("acme", "ABC-123", year=year)
        assert vehicle.year == year

    def test_negative_mileage(self, vehicle_service):
        with pytest.raises(ValidationError):
            vehicle_service.create_vehicle("acme", "ABC-123", mileage=-1)

    def test_negative_cost(self, vehicle_service):
        with pytest.raises(ValidationError):
            vehicle_service.create_vehicle("acme", "ABC-123", cost=-10)

    def test_missing_brand(self, vehicle_service):
        with pytest.raises(ReferentialIntegrityError) as excinfo:
            vehicle_service.create_vehicle("acme", "ABC-123", brand_id=77)
        assert excinfo.value.field == "brand_id"

    def test_disabled_type(self, vehicle_service, catalog_service, sample_type):
        catalog_service.disable(CatalogKind.TYPE, sample_type.id)
        with pytest.raises(ReferentialIntegrityError):
            vehicle_service.create_vehicle("acme", "ABC-123", type_id=sample_type.id)

    def test_model_fills_brand(self, vehicle_service, sample_brand, sample_model):
        vehicle = vehicle_service.create_vehicle("acme", "ABC-123", model_id=sample_model.id)
        assert vehicle.brand_id == sample_brand.id

    def test_model_from_other_brand_is_rejected(self, vehicle_service, catalog_service, sample_model):
        other = catalog_service.create_brand("Nissan")
        with pytest.raises(CrossReferenceError):
            vehicle_service.create_vehicle(
                "acme", "ABC-123", brand_id=other.id, model_id=sample_model.id
            )
        assert vehicle_service.list_vehicles(include_disabled=True) == []


class TestUpdateVehicle:
    """Tests for updating vehicles."""

    def test_update_status(self, vehicle_service, sample_vehicle):
        updated = vehicle_service.update_vehicle(sample_vehicle.id, status=VehicleStatus.SOLD)
        assert updated.status == VehicleStatus.SOLD
        assert updated.plate == sample_vehicle.plate

    def test_id_is_immutable(self, vehicle_service, sample_vehicle):
        with pytest.raises(ValidationError) as excinfo:
            vehicle_service.update_vehicle(sample_vehicle.id, id=99)
        assert excinfo.value.field == "id"

    def test_update_missing_vehicle(self, vehicle_service):
        with pytest.raises(NotFoundError):
            vehicle_service.update_vehicle(12, color="Red")

    def test_unchanged_reference_to_disabled_entry_is_kept(
        self, vehicle_service, catalog_service, sample_vehicle, sample_brand
    ):
        catalog_service.disable(CatalogKind.BRAND, sample_brand.id)
        updated = vehicle_service.update_vehicle(
            sample_vehicle.id, brand_id=sample_brand.id, color="Blue"
        )
        assert updated.brand_id == sample_brand.id
        assert updated.color == "Blue"

    def test_new_reference_to_disabled_entry_is_rejected(
        self, vehicle_service, catalog_service, sample_vehicle
    ):
        other = catalog_service.create_type("Van", "Cargo van")
        catalog_service.disable(CatalogKind.TYPE, other.id)
        with pytest.raises(ReferentialIntegrityError):
            vehicle_service.update_vehicle(sample_vehicle.id, type_id=other.id)

    def test_changing_brand_checks_existing_model(
        self, vehicle_service, catalog_service, sample_vehicle
    ):
        other = catalog_service.create_brand("Nissan")
        with pytest.raises(CrossReferenceError):
            vehicle_service.update_vehicle(sample_vehicle.id, brand_id=other.id)
        assert vehicle_service.get_vehicle(sample_vehicle.id).brand_id == sample_vehicle.brand_id

    def test_changing_brand_and_model_together(self, vehicle_service, catalog_service, sample_vehicle):
        other = catalog_service.create_brand("Nissan")
        model = catalog_service.create_model("NP300", other.id)
        updated = vehicle_service.update_vehicle(sample_vehicle.id, brand_id=other.id, model_id=model.id)
        assert updated.brand_id == other.id
        assert updated.model_id == model.id

    def test_disable_vehicle(self, vehicle_service, sample_vehicle):
        vehicle_service.disable_vehicle(sample_vehicle.id)
        assert vehicle_service.list_vehicles() == []
        assert vehicle_service.get_vehicle(sample_vehicle.id).enabled is False


class TestQueries:
    """Tests for lookups, listing and fleet statistics."""

    def test_get_missing(self, vehicle_service):
        with pytest.raises(NotFoundError):
            vehicle_service.get_vehicle(404)

    def test_find_by_plate_ignores_case(self, vehicle_service, sample_vehicle):
        found = vehicle_service.find_by_plate("abc-123")
        assert found.id == sample_vehicle.id
        assert vehicle_service.find_by_plate("NOPE") is None

    def test_list_filters(self, vehicle_service):
        vehicle_service.create_vehicle("acme", "A-1")
        vehicle_service.create_vehicle("acme", "A-2", status="maintenance")
        vehicle_service.create_vehicle("globex", "G-1", condition="rented")

        assert len(vehicle_service.list_vehicles(company_id="acme")) == 2
        assert [v.plate for v in vehicle_service.list_vehicles(status="maintenance")] == ["A-2"]
        assert [v.plate for v in vehicle_service.list_vehicles(condition="rented")] == ["G-1"]

    def test_fleet_stats(self, vehicle_service):
        for plate, status in [
            ("A-1", "active"),
            ("A-2", "active"),
            ("A-3", "maintenance"),
        ]:
            vehicle_service.create_vehicle("acme", plate, status=status)

        stats = VehicleService.compute_fleet_stats(vehicle_service.list_vehicles())
        assert stats.total == 3
        assert stats.by_status[VehicleStatus.ACTIVE] == 2
        assert stats.by_status[VehicleStatus.MAINTENANCE] == 1
        assert stats.by_status[VehicleStatus.SOLD] == 0
        assert stats.active_percentage == 67

    def test_fleet_stats_empty(self):
        stats = VehicleService.compute_fleet_stats([])
        assert stats.total == 0
        assert stats.active_percentage == 0


@pytest.mark.parametrize(
    "part, total, expected",
    [(0, 0, 0), (1, 2, 50), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 3, 100)],
)
def test_percentage_rounds_half_up(part, total, expected):
    assert percentage(part, total) == expected
