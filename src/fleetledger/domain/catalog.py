"""Catalog domain service: brands, vehicle types and models."""

from typing import Any, Optional

from fleetledger.config import FleetConfig
from fleetledger.database.base import Database
from fleetledger.domain.entities import (
    Brand,
    CatalogEntry,
    CatalogKind,
    VehicleModel,
    VehicleType,
)
from fleetledger.domain.errors import (
    DuplicateError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
    not_found,
    reference_disabled,
    reference_missing,
)
from fleetledger.domain.validation import (
    coerce_enum,
    optional_text,
    require_text,
    validate_year,
)
from fleetledger.utils.logger import get_logger

logger = get_logger(__name__)

KIND_LABELS = {
    CatalogKind.BRAND: "Brand",
    CatalogKind.TYPE: "Vehicle type",
    CatalogKind.MODEL: "Model",
}


class CatalogService:
    """Service for managing the equipment catalog."""

    def __init__(self, db: Database, config: Optional[FleetConfig] = None):
        """Initialize catalog service.

        Args:
            db: Database instance
            config: Settings for year validation; defaults apply if omitted
        """
        self.db = db
        self.config = config or FleetConfig()

    def create_brand(self, name: str, description: Optional[str] = None) -> Brand:
        """Create a brand.

        Raises:
            ValidationError: If name is blank
            DuplicateError: If a brand with the same name (any case) exists
        """
        name = require_text(name, "name")
        brand_id = self.db.create_catalog_entry(
            CatalogKind.BRAND, name, description=optional_text(description)
        )
        logger.info("Created brand %s '%s'", brand_id, name)
        return self.db.get_catalog_entry(CatalogKind.BRAND, brand_id)

    def create_type(self, name: str, description: str) -> VehicleType:
        """Create a vehicle type.

        Raises:
            ValidationError: If name or description is blank
            DuplicateError: If a type with the same name (any case) exists
        """
        name = require_text(name, "name")
        description = require_text(description, "description")
        type_id = self.db.create_catalog_entry(CatalogKind.TYPE, name, description=description)
        logger.info("Created vehicle type %s '%s'", type_id, name)
        return self.db.get_catalog_entry(CatalogKind.TYPE, type_id)

    def create_model(
        self,
        name: str,
        brand_id: int,
        type_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> VehicleModel:
        """Create a model under a brand.

        Args:
            name: Model name
            brand_id: Owning brand; must exist and be enabled
            type_id: Optional vehicle type; must exist and be enabled if given
            year: Optional model year

        Raises:
            ValidationError: If name is blank or year is out of range
            ReferentialIntegrityError: If brand or type is missing or disabled
            DuplicateError: If the brand already has a model with this name
        """
        name = require_text(name, "name")
        year = validate_year(year, self.config.min_year, self.config.max_year_ahead)
        self.require_enabled(CatalogKind.BRAND, brand_id, field="brand_id")
        if type_id is not None:
            self.require_enabled(CatalogKind.TYPE, type_id, field="type_id")

        model_id = self.db.create_catalog_entry(
            CatalogKind.MODEL, name, brand_id=brand_id, type_id=type_id, year=year
        )
        logger.info("Created model %s '%s' for brand %s", model_id, name, brand_id)
        return self.db.get_catalog_entry(CatalogKind.MODEL, model_id)

    def find_or_create(
        self,
        kind: CatalogKind | str,
        name: str,
        brand_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> CatalogEntry:
        """Resolve free-text input to a catalog entry, creating it if absent.

        The lookup is case-insensitive. If a concurrent caller creates the
        same name between our lookup and our insert, the store's uniqueness
        constraint rejects the insert and the winner's entry is returned.

        Args:
            kind: Catalog kind
            name: Free-text name
            brand_id: Owning brand; required for models
            description: Description for new types (defaults to the name)

        Returns:
            Existing or newly created entry (existing entries are returned
            even if disabled)
        """
        kind = coerce_enum(CatalogKind, kind, "kind")
        name = require_text(name, "name")
        if kind == CatalogKind.MODEL and brand_id is None:
            raise ValidationError("brand_id is required to resolve a model", field="brand_id")

        existing = self.db.find_catalog_entry(kind, name, brand_id=brand_id)
        if existing is not None:
            return existing

        try:
            if kind == CatalogKind.BRAND:
                return self.create_brand(name, description)
            if kind == CatalogKind.TYPE:
                return self.create_type(name, description or name)
            return self.create_model(name, brand_id)
        except DuplicateError:
            winner = self.db.find_catalog_entry(kind, name, brand_id=brand_id)
            if winner is None:
                raise
            logger.info(
                "Lost find-or-create race for %s '%s'; returning %s", kind.value, name, winner.id
            )
            return winner

    def get(self, kind: CatalogKind | str, entry_id: int) -> CatalogEntry:
        """Get a catalog entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        kind = coerce_enum(CatalogKind, kind, "kind")
        entry = self.db.get_catalog_entry(kind, entry_id)
        if entry is None:
            raise NotFoundError(not_found(KIND_LABELS[kind], entry_id), field="id", value=entry_id)
        return entry

    def require_enabled(self, kind: CatalogKind, entry_id: int, field: str) -> CatalogEntry:
        """Resolve a reference that must point at an enabled entry.

        Raises:
            ReferentialIntegrityError: If the entry is missing or disabled
        """
        entry = self.db.get_catalog_entry(kind, entry_id)
        if entry is None:
            raise ReferentialIntegrityError(
                reference_missing(KIND_LABELS[kind], entry_id), field=field, value=entry_id
            )
        if not entry.enabled:
            raise ReferentialIntegrityError(
                reference_disabled(KIND_LABELS[kind], entry_id), field=field, value=entry_id
            )
        return entry

    def disable(self, kind: CatalogKind | str, entry_id: int) -> None:
        """Disable a catalog entry.

        References are not checked: vehicles keep pointing at disabled
        entries, only new assignments are refused.
        """
        kind = coerce_enum(CatalogKind, kind, "kind")
        self.get(kind, entry_id)
        self.db.update_catalog_entry(kind, entry_id, enabled=False)
        logger.info("Disabled %s %s", kind.value, entry_id)

    def update_brand(self, brand_id: int, **patch: Any) -> Brand:
        """Update a brand's name, description or enabled flag."""
        fields = self._catalog_patch(CatalogKind.BRAND, patch, {"name", "description", "enabled"})
        if "description" in fields:
            fields["description"] = optional_text(fields["description"])
        self.get(CatalogKind.BRAND, brand_id)
        self.db.update_catalog_entry(CatalogKind.BRAND, brand_id, **fields)
        return self.get(CatalogKind.BRAND, brand_id)

    def update_type(self, type_id: int, **patch: Any) -> VehicleType:
        """Update a vehicle type's name, description or enabled flag."""
        fields = self._catalog_patch(CatalogKind.TYPE, patch, {"name", "description", "enabled"})
        if "description" in fields:
            fields["description"] = require_text(fields["description"], "description")
        self.get(CatalogKind.TYPE, type_id)
        self.db.update_catalog_entry(CatalogKind.TYPE, type_id, **fields)
        return self.get(CatalogKind.TYPE, type_id)

    def update_model(self, model_id: int, **patch: Any) -> VehicleModel:
        """Update a model; re-parenting requires an enabled brand."""
        fields = self._catalog_patch(
            CatalogKind.MODEL, patch, {"name", "brand_id", "type_id", "year", "enabled"}
        )
        current = self.get(CatalogKind.MODEL, model_id)
        if "brand_id" in fields and fields["brand_id"] != current.brand_id:
            self.require_enabled(CatalogKind.BRAND, fields["brand_id"], field="brand_id")
        if fields.get("type_id") is not None and fields["type_id"] != current.type_id:
            self.require_enabled(CatalogKind.TYPE, fields["type_id"], field="type_id")
        if "year" in fields:
            fields["year"] = validate_year(
                fields["year"], self.config.min_year, self.config.max_year_ahead
            )
        self.db.update_catalog_entry(CatalogKind.MODEL, model_id, **fields)
        return self.get(CatalogKind.MODEL, model_id)

    def list_enabled(self, kind: CatalogKind | str) -> list[CatalogEntry]:
        """List enabled entries of a kind, ordered by name."""
        kind = coerce_enum(CatalogKind, kind, "kind")
        return self.db.list_catalog_entries(kind)

    def list_all(self, kind: CatalogKind | str) -> list[CatalogEntry]:
        """List every entry of a kind, disabled ones included."""
        kind = coerce_enum(CatalogKind, kind, "kind")
        return self.db.list_catalog_entries(kind, include_disabled=True)

    def models_by_brand(self, brand_id: int) -> list[VehicleModel]:
        """List all models of a brand regardless of their enabled flag."""
        return self.db.list_catalog_entries(
            CatalogKind.MODEL, include_disabled=True, brand_id=brand_id
        )

    def _catalog_patch(self, kind: CatalogKind, patch: dict[str, Any], allowed: set[str]) -> dict[str, Any]:
        unknown = set(patch) - allowed
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(
                f"{KIND_LABELS[kind]} field '{field}' cannot be updated", field=field
            )
        fields = dict(patch)
        if "name" in fields:
            fields["name"] = require_text(fields["name"], "name")
        if "enabled" in fields:
            fields["enabled"] = bool(fields["enabled"])
        return fields
