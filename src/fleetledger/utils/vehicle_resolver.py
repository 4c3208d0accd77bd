"""Utility for resolving vehicle plates to IDs."""

from fleetledger.domain.errors import NotFoundError
from fleetledger.domain.vehicle import VehicleService


def resolve_vehicle(vehicle_service: VehicleService, vehicle: str | int) -> int:
    """Resolve a vehicle plate or ID to a vehicle ID.

    Args:
        vehicle_service: VehicleService instance
        vehicle: Plate (str) or ID (int or string representation of int)

    Returns:
        Vehicle ID

    Raises:
        NotFoundError: If the vehicle is not found
    """
    # If it's already an integer, use it as ID
    if isinstance(vehicle, int):
        return vehicle_service.get_vehicle(vehicle).id

    # Try to parse as integer (handles string IDs like "1")
    try:
        vehicle_id = int(vehicle)
    except (ValueError, TypeError):
        vehicle_id = None
    if vehicle_id is not None:
        return vehicle_service.get_vehicle(vehicle_id).id

    # Try to find by plate
    found = vehicle_service.find_by_plate(vehicle)
    if found is None:
        raise NotFoundError(f"Vehicle '{vehicle}' not found", field="vehicle", value=vehicle)
    return found.id
