# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели.
"""

from src.shared.models.messages import (
    Envelope,
    HeartbeatPayload,
    HEARTBEAT_RESPONSE_TYPES,
    heartbeat_envelope,
)
from src.shared.models.ride import (
    AdminStatsDTO,
    DriverDTO,
    DriverLocationDTO,
    FareDTO,
    PlaceDTO,
    RideDTO,
    RideRequestDTO,
    VehicleDTO,
)

__all__ = [
    "Envelope",
    "HeartbeatPayload",
    "HEARTBEAT_RESPONSE_TYPES",
    "heartbeat_envelope",
    "AdminStatsDTO",
    "DriverDTO",
    "DriverLocationDTO",
    "FareDTO",
    "PlaceDTO",
    "RideDTO",
    "RideRequestDTO",
    "VehicleDTO",
]
