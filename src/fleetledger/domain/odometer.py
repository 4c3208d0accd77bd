"""Odometer ledger domain service.

Each vehicle owns an append-only sequence of readings. The latest reading is
cached in a per-vehicle head row. That row is a projection of the log: it is
advanced in the same transaction as each append, guarded by its sequence
stamp, and can be rebuilt at any time by replaying the log.
"""

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Optional, Sequence

from fleetledger.config import FleetConfig
from fleetledger.database.base import Database
from fleetledger.domain.entities import (
    OdometerOrdering,
    OdometerReading,
    OdometerStats,
    ReadingSource,
)
from fleetledger.domain.errors import (
    MonotonicityViolation,
    NotFoundError,
    ValidationError,
    not_found,
    odometer_regression,
)
from fleetledger.domain.validation import (
    coerce_enum,
    optional_text,
    validate_non_negative_int,
    validate_timestamp,
)
from fleetledger.utils.logger import get_logger

logger = get_logger(__name__)


def replay_latest(
    readings: Sequence[OdometerReading],
    ordering: OdometerOrdering = OdometerOrdering.INSERTION,
) -> Optional[OdometerReading]:
    """Pick the latest reading from a full log given in ledger order."""
    if not readings:
        return None
    if ordering == OdometerOrdering.TIMESTAMP:
        return max(readings, key=lambda r: (r.at, r.sequence))
    return max(readings, key=lambda r: r.sequence)


class ReadingHistory:
    """Lazy, restartable, newest-first view of a vehicle's readings.

    Nothing is fetched until iteration starts; each new iteration pages
    through the store from the top again. Each page starts strictly below
    the last reading yielded, so appends during iteration never repeat one.
    """

    def __init__(
        self,
        db: Database,
        vehicle_id: int,
        source: Optional[ReadingSource] = None,
        page_size: int = 50,
        order_by: str = "sequence",
    ):
        self.db = db
        self.vehicle_id = vehicle_id
        self.source = source
        self.page_size = page_size
        self.order_by = order_by

    def __iter__(self) -> Iterator[OdometerReading]:
        last = None
        while True:
            page = self.db.list_odometer_readings(
                self.vehicle_id,
                source=self.source,
                order_by=self.order_by,
                descending=True,
                limit=self.page_size,
                before=last,
            )
            yield from page
            if len(page) < self.page_size:
                return
            last = page[-1]


class OdometerService:
    """Service for recording and summarising odometer readings."""

    def __init__(self, db: Database, config: Optional[FleetConfig] = None):
        """Initialize odometer service.

        Args:
            db: Database instance
            config: Settings for stats period and ordering policy
        """
        self.db = db
        self.config = config or FleetConfig()

    @property
    def ordering(self) -> OdometerOrdering:
        return self.config.odometer_ordering

    def add_reading(
        self,
        vehicle_id: int,
        value: int,
        source: ReadingSource | str = ReadingSource.MANUAL,
        at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> OdometerReading:
        """Append a reading to a vehicle's ledger.

        Args:
            vehicle_id: Vehicle ID
            value: Odometer value; a non-negative integer
            source: manual, trip or service
            at: When the reading was taken (defaults to now; naive means UTC)
            note: Optional note

        Returns:
            Stored reading

        Raises:
            NotFoundError: If the vehicle does not exist
            ValidationError: If value, source or at is malformed
            MonotonicityViolation: If value is below the current latest reading
            ConflictError: If another reading was appended concurrently
            StoreUnavailableError: If the store failed
        """
        value = validate_non_negative_int(value, "value")
        source = coerce_enum(ReadingSource, source, "source")
        at = validate_timestamp(at)
        note = optional_text(note)
        self._require_vehicle(vehicle_id)

        sequence, latest = self.db.get_odometer_head(vehicle_id)
        becomes_latest = True
        if self.ordering == OdometerOrdering.TIMESTAMP:
            becomes_latest = self._check_timestamp_neighbours(vehicle_id, value, at, latest)
        elif latest is not None and value < latest.value:
            self._reject(vehicle_id, value, latest.value)

        reading = self.db.append_odometer_reading(
            vehicle_id,
            expected_sequence=sequence,
            value=value,
            source=source,
            at=at,
            note=note,
            becomes_latest=becomes_latest,
        )
        logger.info(
            "Recorded odometer %s for vehicle %s (sequence %s)", value, vehicle_id, reading.sequence
        )
        return reading

    def latest(self, vehicle_id: int) -> Optional[OdometerReading]:
        """Get the latest reading of a vehicle, or None."""
        _, latest = self.db.get_odometer_head(vehicle_id)
        return latest

    def compute_stats(
        self,
        vehicle_id: int,
        period_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> OdometerStats:
        """Summarise distance travelled over the last ``period_days``.

        Distance runs from the earliest reading in the window to the latest
        one. Fewer than two readings in the window yield zero distance.
        """
        if period_days is None:
            period_days = self.config.stats_period_days
        if isinstance(period_days, bool) or not isinstance(period_days, int) or period_days <= 0:
            raise ValidationError(
                f"period_days must be a positive integer, got {period_days!r}",
                field="period_days",
                value=period_days,
            )
        now = validate_timestamp(now, field="now")
        since = now - timedelta(days=period_days)

        in_window = self.db.list_odometer_readings(
            vehicle_id, start=since, end=now, order_by="at"
        )
        if len(in_window) < 2:
            return OdometerStats(
                period=period_days,
                total_distance=0,
                average_daily=0.0,
                readings_count=len(in_window),
            )

        earliest = in_window[0]
        latest = self.latest(vehicle_id) or in_window[-1]
        total_distance = latest.value - earliest.value
        return OdometerStats(
            period=period_days,
            total_distance=total_distance,
            average_daily=float(
                (Decimal(total_distance) / period_days).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            ),
            readings_count=len(in_window),
            first_reading=earliest.value,
            last_reading=latest.value,
        )

    def history(
        self,
        vehicle_id: int,
        source: Optional[ReadingSource | str] = None,
        page_size: int = 50,
    ) -> ReadingHistory:
        """Newest-first readings of a vehicle, fetched lazily."""
        if source is not None:
            source = coerce_enum(ReadingSource, source, "source")
        order_by = "at" if self.ordering == OdometerOrdering.TIMESTAMP else "sequence"
        return ReadingHistory(self.db, vehicle_id, source=source, page_size=page_size, order_by=order_by)

    def replay_latest(self, vehicle_id: int) -> Optional[OdometerReading]:
        """Recompute the latest reading from the full log."""
        readings = self.db.list_odometer_readings(vehicle_id)
        return replay_latest(readings, self.ordering)

    def rebuild_projection(self, vehicle_id: int) -> Optional[OdometerReading]:
        """Rewrite the cached head from a full replay.

        Raises:
            ConflictError: If a reading was appended during the rebuild
        """
        sequence, _ = self.db.get_odometer_head(vehicle_id)
        readings = self.db.list_odometer_readings(vehicle_id)
        latest = replay_latest(readings, self.ordering)
        replayed_sequence = readings[-1].sequence if readings else 0
        self.db.rebuild_odometer_head(
            vehicle_id,
            expected_sequence=sequence,
            sequence=replayed_sequence,
            latest=latest,
        )
        logger.info("Rebuilt odometer head for vehicle %s from %s readings", vehicle_id, len(readings))
        return latest

    def _require_vehicle(self, vehicle_id: int) -> None:
        if self.db.get_vehicle(vehicle_id) is None:
            raise NotFoundError(not_found("Vehicle", vehicle_id), field="vehicle_id", value=vehicle_id)

    def _check_timestamp_neighbours(
        self,
        vehicle_id: int,
        value: int,
        at: datetime,
        latest: Optional[OdometerReading],
    ) -> bool:
        """Validate against readings around ``at``; return whether it becomes latest."""
        before = self.db.list_odometer_readings(
            vehicle_id, end=at, order_by="at", descending=True, limit=1
        )
        if before and value < before[0].value:
            self._reject(vehicle_id, value, before[0].value)
        after = self.db.get_reading_after(vehicle_id, at)
        if after is not None and value > after.value:
            logger.warning(
                "Rejected backdated odometer %s for vehicle %s: later reading is %s",
                value, vehicle_id, after.value,
            )
            raise MonotonicityViolation(
                f"Odometer value {value} for vehicle {vehicle_id} exceeds the later "
                f"reading {after.value} taken at {after.at.isoformat()}",
                field="value",
                value=value,
            )
        return latest is None or at >= latest.at

    @staticmethod
    def _reject(vehicle_id: int, value: int, latest_value: int) -> None:
        logger.warning(
            "Rejected odometer %s for vehicle %s: latest is %s", value, vehicle_id, latest_value
        )
        raise MonotonicityViolation(
            odometer_regression(vehicle_id, value, latest_value), field="value", value=value
        )
