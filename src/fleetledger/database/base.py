"""Abstract database interface.

The store performs no domain validation beyond the uniqueness and
version-stamp guards it is asked to enforce; every invariant is checked by
the domain services before they call a mutating method here.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from fleetledger.domain.entities import (
    CatalogEntry,
    CatalogKind,
    Vehicle,
    OdometerReading,
    RechargeCard,
    RechargeMovement,
)


class Database(ABC):
    """Abstract database interface for fleetledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Catalog operations
    @abstractmethod
    def create_catalog_entry(self, kind: CatalogKind, name: str, **attrs: Any) -> int:
        """Create a brand, type or model. Returns its ID.

        Raises DuplicateError when the case-insensitive name is taken
        (within the brand, for models).
        """
        pass

    @abstractmethod
    def get_catalog_entry(self, kind: CatalogKind, entry_id: int) -> Optional[CatalogEntry]:
        """Get catalog entry by ID."""
        pass

    @abstractmethod
    def find_catalog_entry(
        self, kind: CatalogKind, name: str, brand_id: Optional[int] = None
    ) -> Optional[CatalogEntry]:
        """Find a catalog entry by case-insensitive name (within a brand, for models)."""
        pass

    @abstractmethod
    def list_catalog_entries(
        self,
        kind: CatalogKind,
        include_disabled: bool = False,
        brand_id: Optional[int] = None,
    ) -> list[CatalogEntry]:
        """List catalog entries ordered by name."""
        pass

    @abstractmethod
    def update_catalog_entry(self, kind: CatalogKind, entry_id: int, **fields: Any) -> None:
        """Update catalog entry fields."""
        pass

    # Vehicle operations
    @abstractmethod
    def create_vehicle(self, **fields: Any) -> int:
        """Create a vehicle. Returns vehicle ID."""
        pass

    @abstractmethod
    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        """Get vehicle by ID."""
        pass

    @abstractmethod
    def find_vehicle_by_plate(self, plate: str) -> Optional[Vehicle]:
        """Find a vehicle by plate (case-insensitive)."""
        pass

    @abstractmethod
    def list_vehicles(
        self,
        company_id: Optional[str] = None,
        status: Optional[str] = None,
        condition: Optional[str] = None,
        include_disabled: bool = False,
    ) -> list[Vehicle]:
        """List vehicles, newest first, with optional filters."""
        pass

    @abstractmethod
    def update_vehicle(self, vehicle_id: int, **fields: Any) -> None:
        """Update vehicle fields."""
        pass

    # Odometer operations
    @abstractmethod
    def get_odometer_head(self, vehicle_id: int) -> tuple[int, Optional[OdometerReading]]:
        """Return (sequence, latest reading) from the cached projection.

        Sequence is 0 and the reading None for a vehicle with no readings.
        """
        pass

    @abstractmethod
    def append_odometer_reading(
        self,
        vehicle_id: int,
        expected_sequence: int,
        value: int,
        source: str,
        at: datetime,
        note: Optional[str] = None,
        becomes_latest: bool = True,
    ) -> OdometerReading:
        """Append a reading and advance the head in one transaction.

        Raises ConflictError when the head sequence is no longer
        expected_sequence.
        """
        pass

    @abstractmethod
    def list_odometer_readings(
        self,
        vehicle_id: int,
        source: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        order_by: str = "sequence",
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
        before: Optional[OdometerReading] = None,
    ) -> list[OdometerReading]:
        """List readings of a vehicle.

        Args:
            start: Optional inclusive lower bound on ``at``
            end: Optional inclusive upper bound on ``at``
            order_by: "sequence" (ledger order) or "at"
            before: Only readings strictly below this one in the ``order_by``
                ordering, for keyset paging
        """
        pass

    @abstractmethod
    def get_reading_after(self, vehicle_id: int, at: datetime) -> Optional[OdometerReading]:
        """Get the earliest reading strictly after ``at``."""
        pass

    @abstractmethod
    def rebuild_odometer_head(
        self,
        vehicle_id: int,
        expected_sequence: int,
        sequence: int,
        latest: Optional[OdometerReading],
    ) -> None:
        """Overwrite the cached head with a replayed value."""
        pass

    # Recharge card operations
    @abstractmethod
    def create_card(
        self,
        company_id: str,
        code: str,
        provider: str,
        status: str,
        allow_negative: bool,
    ) -> int:
        """Create a recharge card. Returns card ID.

        Raises DuplicateError when the code is taken within the company.
        """
        pass

    @abstractmethod
    def get_card(self, card_id: int) -> Optional[RechargeCard]:
        """Get card by ID."""
        pass

    @abstractmethod
    def find_card_by_code(
        self, code: str, company_id: Optional[str] = None
    ) -> Optional[RechargeCard]:
        """Find an enabled card by code, optionally within a company."""
        pass

    @abstractmethod
    def list_cards(
        self,
        company_id: Optional[str] = None,
        status: Optional[str] = None,
        provider: Optional[str] = None,
        include_disabled: bool = False,
    ) -> list[RechargeCard]:
        """List cards, newest first, with optional filters."""
        pass

    @abstractmethod
    def update_card(self, card_id: int, **fields: Any) -> None:
        """Update card fields and bump its version."""
        pass

    @abstractmethod
    def append_movement(
        self,
        card_id: int,
        expected_version: int,
        sequence: int,
        amount: Decimal,
        type: str,
        at: datetime,
        new_balance: Decimal,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> RechargeMovement:
        """Append a movement and set the card balance in one transaction.

        Raises ConflictError when the card version is no longer
        expected_version.
        """
        pass

    @abstractmethod
    def get_movement(self, movement_id: int) -> Optional[RechargeMovement]:
        """Get movement by ID."""
        pass

    @abstractmethod
    def get_last_movement(self, card_id: int) -> Optional[RechargeMovement]:
        """Get the most recently appended movement of a card."""
        pass

    @abstractmethod
    def list_movements(
        self,
        card_id: int,
        type: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[RechargeMovement]:
        """List movements of a card in ledger order (newest first by default)."""
        pass

    @abstractmethod
    def rebuild_card_balance(
        self,
        card_id: int,
        expected_version: int,
        balance: Decimal,
        movement_count: int,
        last_movement_id: Optional[int],
    ) -> None:
        """Overwrite the cached balance with a replayed value."""
        pass
