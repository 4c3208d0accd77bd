"""Tests for CatalogService."""

import pytest

from fleetledger.domain.entities import Brand, CatalogKind, VehicleModel, VehicleType
from fleetledger.domain.errors import (
    DuplicateError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)


class TestCreate:
    """Tests for creating catalog entries."""

    def test_create_brand(self, catalog_service):
        brand = catalog_service.create_brand("  Toyota ", description="Japanese maker")
        assert isinstance(brand, Brand)
        assert brand.name == "Toyota"
        assert brand.description == "Japanese maker"
        assert brand.enabled is True

    def test_create_brand_blank_name(self, catalog_service):
        with pytest.raises(ValidationError) as excinfo:
            catalog_service.create_brand("   ")
        assert excinfo.value.field == "name"

    def test_create_brand_duplicate_ignores_case(self, catalog_service):
        catalog_service.create_brand("Toyota")
        with pytest.raises(DuplicateError):
            catalog_service.create_brand("TOYOTA")

    def test_duplicate_is_a_validation_error(self, catalog_service):
        catalog_service.create_brand("Toyota")
        with pytest.raises(ValidationError):
            catalog_service.create_brand("toyota")

    def test_create_type_requires_description(self, catalog_service):
        with pytest.raises(ValidationError) as excinfo:
            catalog_service.create_type("Pickup", "  ")
        assert excinfo.value.field == "description"

    def test_create_type(self, catalog_service):
        vehicle_type = catalog_service.create_type("Van", "Cargo van")
        assert isinstance(vehicle_type, VehicleType)
        assert vehicle_type.description == "Cargo van"

    def test_create_model(self, catalog_service, sample_brand, sample_type):
        model = catalog_service.create_model("Hilux", sample_brand.id, type_id=sample_type.id, year=2020)
        assert isinstance(model, VehicleModel)
        assert model.brand_id == sample_brand.id
        assert model.type_id == sample_type.id
        assert model.year == 2020

    def test_create_model_missing_brand(self, catalog_service):
        with pytest.raises(ReferentialIntegrityError) as excinfo:
            catalog_service.create_model("Hilux", 999)
        assert excinfo.value.field == "brand_id"

    def test_create_model_disabled_brand(self, catalog_service, sample_brand):
        catalog_service.disable(CatalogKind.BRAND, sample_brand.id)
        with pytest.raises(ReferentialIntegrityError):
            catalog_service.create_model("Hilux", sample_brand.id)

    def test_create_model_disabled_type(self, catalog_service, sample_brand, sample_type):
        catalog_service.disable(CatalogKind.TYPE, sample_type.id)
        with pytest.raises(ReferentialIntegrityError) as excinfo:
            catalog_service.create_model("Hilux", sample_brand.id, type_id=sample_type.id)
        assert excinfo.value.field == "type_id"

    def test_create_model_year_out_of_range(self, catalog_service, sample_brand):
        with pytest.raises(ValidationError):
            catalog_service.create_model("Model T", sample_brand.id, year=1899)

    def test_same_model_name_under_different_brands(self, catalog_service, sample_brand):
        other = catalog_service.create_brand("Nissan")
        first = catalog_service.create_model("Sport", sample_brand.id)
        second = catalog_service.create_model("sport", other.id)
        assert first.id != second.id

    def test_model_name_unique_within_brand(self, catalog_service, sample_brand):
        catalog_service.create_model("Hilux", sample_brand.id)
        with pytest.raises(DuplicateError):
            catalog_service.create_model("HILUX", sample_brand.id)


class TestFindOrCreate:
    """Tests for resolving free-text catalog input."""

    def test_creates_when_absent(self, catalog_service):
        brand = catalog_service.find_or_create(CatalogKind.BRAND, "Ford")
        assert brand.name == "Ford"
        assert len(catalog_service.list_enabled(CatalogKind.BRAND)) == 1

    def test_returns_existing_ignoring_case(self, catalog_service, sample_brand):
        found = catalog_service.find_or_create("brand", "  toyota ")
        assert found.id == sample_brand.id
        assert found.name == "Toyota"

    def test_is_idempotent(self, catalog_service):
        first = catalog_service.find_or_create(CatalogKind.TYPE, "Sedan")
        second = catalog_service.find_or_create(CatalogKind.TYPE, "SEDAN")
        assert first.id == second.id
        assert first.description == "Sedan"
        assert len(catalog_service.list_all(CatalogKind.TYPE)) == 1

    def test_model_requires_brand(self, catalog_service):
        with pytest.raises(ValidationError):
            catalog_service.find_or_create(CatalogKind.MODEL, "Hilux")

    def test_model_scoped_to_brand(self, catalog_service, sample_brand, sample_model):
        other = catalog_service.create_brand("Nissan")
        same = catalog_service.find_or_create(CatalogKind.MODEL, "hilux", brand_id=sample_brand.id)
        created = catalog_service.find_or_create(CatalogKind.MODEL, "hilux", brand_id=other.id)
        assert same.id == sample_model.id
        assert created.id != sample_model.id
        assert created.brand_id == other.id

    def test_returns_disabled_entry(self, catalog_service, sample_brand):
        catalog_service.disable(CatalogKind.BRAND, sample_brand.id)
        found = catalog_service.find_or_create(CatalogKind.BRAND, "Toyota")
        assert found.id == sample_brand.id
        assert found.enabled is False

    def test_lost_race_returns_winner(self, catalog_service, temp_db, monkeypatch):
        """A concurrent creator wins between lookup and insert."""
        winner = catalog_service.create_brand("Mazda")
        original = temp_db.find_catalog_entry
        calls = []

        def stale_lookup(kind, name, brand_id=None):
            calls.append(name)
            if len(calls) == 1:
                return None
            return original(kind, name, brand_id=brand_id)

        monkeypatch.setattr(temp_db, "find_catalog_entry", stale_lookup)

        found = catalog_service.find_or_create(CatalogKind.BRAND, "mazda")
        assert found.id == winner.id
        assert len(calls) == 2
        assert len(catalog_service.list_all(CatalogKind.BRAND)) == 1


class TestQueries:
    """Tests for listing, updating and disabling."""

    def test_get_missing(self, catalog_service):
        with pytest.raises(NotFoundError):
            catalog_service.get(CatalogKind.BRAND, 42)

    def test_list_enabled_hides_disabled(self, catalog_service):
        kept = catalog_service.create_brand("Toyota")
        gone = catalog_service.create_brand("Datsun")
        catalog_service.disable(CatalogKind.BRAND, gone.id)

        enabled = catalog_service.list_enabled(CatalogKind.BRAND)
        assert [b.id for b in enabled] == [kept.id]
        assert len(catalog_service.list_all(CatalogKind.BRAND)) == 2

    def test_list_ordered_by_name(self, catalog_service):
        catalog_service.create_brand("nissan")
        catalog_service.create_brand("Ford")
        catalog_service.create_brand("Toyota")
        names = [b.name for b in catalog_service.list_enabled(CatalogKind.BRAND)]
        assert names == ["Ford", "nissan", "Toyota"]

    def test_models_by_brand_includes_disabled(self, catalog_service, sample_brand):
        first = catalog_service.create_model("Hilux", sample_brand.id)
        second = catalog_service.create_model("Corolla", sample_brand.id)
        catalog_service.disable(CatalogKind.MODEL, second.id)

        models = catalog_service.models_by_brand(sample_brand.id)
        assert {m.id for m in models} == {first.id, second.id}

    def test_disable_missing(self, catalog_service):
        with pytest.raises(NotFoundError):
            catalog_service.disable(CatalogKind.TYPE, 5)

    def test_update_brand_name(self, catalog_service, sample_brand):
        updated = catalog_service.update_brand(sample_brand.id, name="Toyota Motors")
        assert updated.name == "Toyota Motors"
        assert catalog_service.find_or_create(CatalogKind.BRAND, "toyota motors").id == sample_brand.id

    def test_update_brand_to_taken_name(self, catalog_service, sample_brand):
        catalog_service.create_brand("Nissan")
        with pytest.raises(DuplicateError):
            catalog_service.update_brand(sample_brand.id, name="nissan")

    def test_update_brand_unknown_field(self, catalog_service, sample_brand):
        with pytest.raises(ValidationError):
            catalog_service.update_brand(sample_brand.id, color="red")

    def test_update_type_blank_description(self, catalog_service, sample_type):
        with pytest.raises(ValidationError):
            catalog_service.update_type(sample_type.id, description="")

    def test_update_model_reparent_to_disabled_brand(self, catalog_service, sample_model):
        other = catalog_service.create_brand("Nissan")
        catalog_service.disable(CatalogKind.BRAND, other.id)
        with pytest.raises(ReferentialIntegrityError):
            catalog_service.update_model(sample_model.id, brand_id=other.id)

    def test_update_model_year(self, catalog_service, sample_model):
        updated = catalog_service.update_model(sample_model.id, year=2023)
        assert updated.year == 2023
