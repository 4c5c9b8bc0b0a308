# src/shared/models/ride.py
"""
DTO поездок, водителей и статистики.
Поля на проводе приходят в camelCase (createdAt, licensePlate).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from src.common.constants import RideStatus, VehicleClass


class CamelModel(BaseModel):
    """Базовая модель: camelCase на проводе, snake_case в коде."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PlaceDTO(CamelModel):
    """Адрес с координатами [lat, lng]."""
    address: str
    coordinates: tuple[float, float]


class RideRequestDTO(CamelModel):
    pickup_location: PlaceDTO
    dropoff_location: PlaceDTO


class VehicleDTO(CamelModel):
    make: str
    model: str
    license_plate: str


class DriverDTO(CamelModel):
    id: str
    name: str
    phone: str
    vehicle: VehicleDTO


class RideDTO(CamelModel):
    """Поездка в том виде, в каком её присылает backend."""
    id: str
    request: Optional[RideRequestDTO] = None
    driver: Optional[DriverDTO] = None
    status: RideStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DriverLocationDTO(CamelModel):
    """Текущая позиция водителя."""
    coordinates: tuple[float, float]
    heading: float = 0.0
    speed: Optional[float] = None
    timestamp: Optional[int] = None


class AdminStatsDTO(CamelModel):
    """
    Статистика панели администратора.
    Live-обновления присылают только изменившиеся поля, поэтому все поля опциональны.
    """
    total_users: Optional[int] = None
    total_drivers: Optional[int] = None
    active_rides: Optional[int] = None
    completed_rides: Optional[int] = None
    cancelled_rides: Optional[int] = None
    total_revenue: Optional[float] = None
    average_rating: Optional[float] = Field(default=None, ge=0, le=5)


class FareDTO(CamelModel):
    """Расчёт стоимости поездки."""
    distance_km: float
    duration_minutes: float
    vehicle_class: Optional[VehicleClass] = None
    base_fare: float
    distance_fare: float
    time_fare: float
    minimum_applied: bool = False
    total_fare: float
    currency: str = "EUR"
