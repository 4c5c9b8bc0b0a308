# src/services/rides/__init__.py
from src.services.rides.service import RideService

__all__ = ["RideService"]
