"""Tests for vehicle resolution."""

import pytest

from fleetledger.domain.errors import NotFoundError
from fleetledger.utils.vehicle_resolver import resolve_vehicle


def test_resolve_by_id(vehicle_service, sample_vehicle):
    assert resolve_vehicle(vehicle_service, sample_vehicle.id) == sample_vehicle.id
    assert resolve_vehicle(vehicle_service, str(sample_vehicle.id)) == sample_vehicle.id


def test_resolve_by_plate(vehicle_service, sample_vehicle):
    assert resolve_vehicle(vehicle_service, "abc-123") == sample_vehicle.id


def test_resolve_unknown(vehicle_service):
    with pytest.raises(NotFoundError):
        resolve_vehicle(vehicle_service, "NOPE-1")
    with pytest.raises(NotFoundError):
        resolve_vehicle(vehicle_service, 77)
