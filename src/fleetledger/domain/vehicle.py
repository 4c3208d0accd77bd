"""Vehicle domain service."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from fleetledger.config import FleetConfig
from fleetledger.database.base import Database
from fleetledger.domain.catalog import CatalogService
from fleetledger.domain.entities import (
    CatalogKind,
    FleetStats,
    OdometerUnit,
    Vehicle,
    VehicleCondition,
    VehicleStatus,
)
from fleetledger.domain.errors import (
    CrossReferenceError,
    NotFoundError,
    ValidationError,
    model_brand_mismatch,
    not_found,
)
from fleetledger.domain.validation import (
    coerce_enum,
    optional_text,
    require_text,
    to_decimal,
    validate_non_negative_int,
    validate_year,
)
from fleetledger.utils.logger import get_logger

logger = get_logger(__name__)

OPTIONAL_FIELDS = {
    "brand_id",
    "model_id",
    "type_id",
    "vin",
    "year",
    "color",
    "acquisition_date",
    "cost",
    "mileage",
    "odometer_unit",
    "status",
    "condition",
}
UPDATABLE_FIELDS = OPTIONAL_FIELDS | {"company_id", "plate", "enabled"}
REFERENCE_KINDS = {
    "brand_id": CatalogKind.BRAND,
    "type_id": CatalogKind.TYPE,
    "model_id": CatalogKind.MODEL,
}


def percentage(part: int, total: int) -> int:
    """Integer percentage rounded half-up; 0 when total is 0."""
    if total == 0:
        return 0
    ratio = Decimal(part) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class VehicleService:
    """Service for managing vehicles."""

    def __init__(self, db: Database, config: Optional[FleetConfig] = None):
        """Initialize vehicle service.

        Args:
            db: Database instance
            config: Settings for year validation; defaults apply if omitted
        """
        self.db = db
        self.config = config or FleetConfig()
        self.catalog = CatalogService(db, self.config)

    def create_vehicle(self, company_id: str, plate: str, **fields: Any) -> Vehicle:
        """Create a vehicle.

        Args:
            company_id: Owning company
            plate: License plate
            **fields: Any of brand_id, model_id, type_id, vin, year, color,
                acquisition_date, cost, mileage, odometer_unit, status,
                condition

        Returns:
            Created vehicle

        Raises:
            ValidationError: If a field is missing, malformed or out of range
            ReferentialIntegrityError: If a catalog reference is missing or disabled
            CrossReferenceError: If the model does not belong to the brand
        """
        unknown = set(fields) - OPTIONAL_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(f"Unknown vehicle field '{field}'", field=field)

        values = self._validate_fields(fields)
        values["company_id"] = require_text(company_id, "company_id")
        values["plate"] = require_text(plate, "plate")
        values.setdefault("odometer_unit", OdometerUnit.KM)
        values.setdefault("status", VehicleStatus.ACTIVE)
        values.setdefault("condition", VehicleCondition.NEW)

        for field, kind in REFERENCE_KINDS.items():
            if values.get(field) is not None:
                self.catalog.require_enabled(kind, values[field], field=field)

        if values.get("model_id") is not None:
            model = self.catalog.get(CatalogKind.MODEL, values["model_id"])
            if values.get("brand_id") is None:
                values["brand_id"] = model.brand_id
            self._check_model_brand(model.id, model.brand_id, values["brand_id"])

        vehicle_id = self.db.create_vehicle(**values)
        logger.info("Created vehicle %s plate '%s'", vehicle_id, values["plate"])
        return self.get_vehicle(vehicle_id)

    def update_vehicle(self, vehicle_id: int, **patch: Any) -> Vehicle:
        """Update a vehicle with the same rules as creation, for patched fields only.

        A reference is only checked for existence and enabled state when it
        changes; an unchanged reference to a since-disabled entry is kept.

        Raises:
            NotFoundError: If the vehicle does not exist
            ValidationError: If a field is malformed, unknown or is ``id``
            ReferentialIntegrityError: If a new reference is missing or disabled
            CrossReferenceError: If the resulting model does not belong to the brand
        """
        if "id" in patch:
            raise ValidationError("Vehicle id cannot be changed", field="id", value=patch["id"])
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(f"Unknown vehicle field '{field}'", field=field)

        current = self.get_vehicle(vehicle_id)
        values = self._validate_fields({k: v for k, v in patch.items() if k in OPTIONAL_FIELDS})
        if "company_id" in patch:
            values["company_id"] = require_text(patch["company_id"], "company_id")
        if "plate" in patch:
            values["plate"] = require_text(patch["plate"], "plate")
        if "enabled" in patch:
            values["enabled"] = bool(patch["enabled"])

        for field, kind in REFERENCE_KINDS.items():
            if field in values and values[field] is not None and values[field] != getattr(current, field):
                self.catalog.require_enabled(kind, values[field], field=field)

        if "brand_id" in values or "model_id" in values:
            brand_id = values.get("brand_id", current.brand_id)
            model_id = values.get("model_id", current.model_id)
            if model_id is not None:
                model = self.catalog.get(CatalogKind.MODEL, model_id)
                self._check_model_brand(model.id, model.brand_id, brand_id)

        if values:
            self.db.update_vehicle(vehicle_id, **values)
            logger.info("Updated vehicle %s fields %s", vehicle_id, sorted(values))
        return self.get_vehicle(vehicle_id)

    def get_vehicle(self, vehicle_id: int) -> Vehicle:
        """Get vehicle by ID.

        Raises:
            NotFoundError: If the vehicle does not exist
        """
        vehicle = self.db.get_vehicle(vehicle_id)
        if vehicle is None:
            raise NotFoundError(not_found("Vehicle", vehicle_id), field="id", value=vehicle_id)
        return vehicle

    def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        """Find a vehicle by plate, ignoring case."""
        return self.db.find_vehicle_by_plate(plate)

    def list_vehicles(
        self,
        company_id: Optional[str] = None,
        status: Optional[VehicleStatus | str] = None,
        condition: Optional[VehicleCondition | str] = None,
        include_disabled: bool = False,
    ) -> list[Vehicle]:
        """List vehicles with optional filters."""
        if status is not None:
            status = coerce_enum(VehicleStatus, status, "status")
        if condition is not None:
            condition = coerce_enum(VehicleCondition, condition, "condition")
        return self.db.list_vehicles(
            company_id=company_id,
            status=status,
            condition=condition,
            include_disabled=include_disabled,
        )

    def disable_vehicle(self, vehicle_id: int) -> Vehicle:
        """Soft-delete a vehicle; its ledgers are kept."""
        return self.update_vehicle(vehicle_id, enabled=False)

    @staticmethod
    def compute_fleet_stats(vehicles: Iterable[Vehicle]) -> FleetStats:
        """Aggregate a vehicle collection by status."""
        by_status = {status: 0 for status in VehicleStatus}
        total = 0
        for vehicle in vehicles:
            total += 1
            by_status[vehicle.status] += 1
        return FleetStats(
            total=total,
            by_status=by_status,
            active_percentage=percentage(by_status[VehicleStatus.ACTIVE], total),
        )

    def _validate_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field in ("brand_id", "model_id", "type_id"):
            if field in fields:
                value = fields[field]
                if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                    raise ValidationError(f"{field} must be an integer id", field=field, value=value)
                values[field] = value
        for field in ("vin", "color"):
            if field in fields:
                values[field] = optional_text(fields[field])
        if "year" in fields:
            values["year"] = validate_year(
                fields["year"], self.config.min_year, self.config.max_year_ahead
            )
        if "mileage" in fields:
            mileage = fields["mileage"]
            values["mileage"] = None if mileage is None else validate_non_negative_int(mileage, "mileage")
        if "cost" in fields:
            cost = fields["cost"]
            if cost is not None:
                cost = to_decimal(cost, "cost")
                if cost < 0:
                    raise ValidationError(f"cost must not be negative, got {cost}", field="cost", value=cost)
            values["cost"] = cost
        if "acquisition_date" in fields:
            acquired = fields["acquisition_date"]
            if acquired is not None and not isinstance(acquired, date):
                raise ValidationError(
                    f"acquisition_date must be a date, got {acquired!r}",
                    field="acquisition_date",
                    value=acquired,
                )
            values["acquisition_date"] = acquired
        if "odometer_unit" in fields:
            values["odometer_unit"] = coerce_enum(OdometerUnit, fields["odometer_unit"], "odometer_unit")
        if "status" in fields:
            values["status"] = coerce_enum(VehicleStatus, fields["status"], "status")
        if "condition" in fields:
            values["condition"] = coerce_enum(VehicleCondition, fields["condition"], "condition")
        return values

    @staticmethod
    def _check_model_brand(model_id: int, model_brand_id: int, brand_id: Optional[int]) -> None:
        if model_brand_id != brand_id:
            logger.warning(
                "Rejected model %s for brand %s (model belongs to %s)", model_id, brand_id, model_brand_id
            )
            raise CrossReferenceError(
                model_brand_mismatch(model_id, model_brand_id, brand_id),
                field="model_id",
                value=model_id,
            )
