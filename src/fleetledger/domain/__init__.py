"""Domain layer for fleetledger."""

__all__ = [
    "CatalogService",
    "VehicleService",
    "OdometerService",
    "RechargeCardService",
]

_SERVICES = {
    "CatalogService": "fleetledger.domain.catalog",
    "VehicleService": "fleetledger.domain.vehicle",
    "OdometerService": "fleetledger.domain.odometer",
    "RechargeCardService": "fleetledger.domain.recharge",
}


def __getattr__(name):
    # Lazy so database.base can import domain.entities before any service
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
