# src/core/pricing/__init__.py
"""
Домен тарификации.
"""

from src.core.pricing.service import FareCalculator, FareRates

__all__ = ["FareCalculator", "FareRates"]
