# src/core/__init__.py
"""
Доменный слой (Core Domain).
Чистая бизнес-логика, независимая от инфраструктуры.
"""

from src.core.billing import BillingService
from src.core.pricing import FareCalculator

__all__ = [
    "BillingService",
    "FareCalculator",
]
