# src/core/billing/__init__.py
"""
Домен биллинга.
"""

from src.core.billing.service import (
    BillingRates,
    BillingService,
    CompanyBilling,
    DriverEarnings,
    calculate_driver_earnings,
    calculate_due_date,
)

__all__ = [
    "BillingRates",
    "BillingService",
    "CompanyBilling",
    "DriverEarnings",
    "calculate_driver_earnings",
    "calculate_due_date",
]
