# src/core/billing/service.py
"""
Сервис биллинга.
Ежемесячные счета компаний: абонплата за такси и комиссия с поездок.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Optional

from src.common.constants import BillingStatus, TypeMsg
from src.common.logger import log_info
from src.infra.api_client import ApiClient


LOGGER_NAME = "billing"


@dataclass(frozen=True)
class BillingRates:
    """Ставки биллинга."""
    taxi_monthly_fee: float = 10.00
    ride_commission_percent: float = 10.0
    driver_commission_percent: float = 15.0
    due_day: int = 10

    @classmethod
    def from_settings(cls) -> "BillingRates":
        from src.config import settings

        billing = settings.billing
        return cls(
            taxi_monthly_fee=billing.TAXI_MONTHLY_FEE,
            ride_commission_percent=billing.RIDE_COMMISSION_PERCENT,
            driver_commission_percent=billing.DRIVER_COMMISSION_PERCENT,
            due_day=billing.DUE_DAY,
        )


@dataclass
class CompanyBilling:
    """Счёт компании за месяц."""
    company_id: str
    month: str
    active_taxis: int
    taxi_fees: float
    total_rides: int
    total_ride_revenue: float
    commission_percent: float
    commission_amount: float
    total_due: float
    due_date: date
    status: BillingStatus = BillingStatus.PENDING


@dataclass
class DriverEarnings:
    """Разделение стоимости поездки между водителем и платформой."""
    total_fare: float
    admin_commission: float
    driver_earnings: float


def calculate_due_date(month: str, due_day: int = 10) -> date:
    """
    Срок оплаты: due_day-е число месяца, следующего за расчётным.

    Args:
        month: Расчётный месяц в формате YYYY-MM

    Raises:
        ValueError: неверный формат месяца
    """
    try:
        period = datetime.strptime(month, "%Y-%m")
    except ValueError:
        raise ValueError(f"Месяц должен быть в формате YYYY-MM: {month!r}") from None

    if period.month == 12:
        return date(period.year + 1, 1, due_day)
    return date(period.year, period.month + 1, due_day)


def calculate_driver_earnings(ride_fare: float, commission_percent: float = 15.0) -> DriverEarnings:
    """Доход индивидуального водителя за вычетом комиссии платформы."""
    if ride_fare < 0:
        raise ValueError("Стоимость поездки не может быть отрицательной")

    commission = round(ride_fare * commission_percent / 100, 2)
    return DriverEarnings(
        total_fare=ride_fare,
        admin_commission=commission,
        driver_earnings=round(ride_fare - commission, 2),
    )


class BillingService:
    """
    Сервис биллинга компаний.

    Реализует:
    - Расчёт ежемесячного счёта (такси * абонплата + % с выручки)
    - Формирование текста счёта
    - Историю счетов за несколько месяцев
    """

    def __init__(self, api: ApiClient, rates: Optional[BillingRates] = None) -> None:
        """
        Args:
            api: HTTP-клиент backend
            rates: Ставки (по умолчанию из конфига)
        """
        self._api = api
        self._rates = rates or BillingRates.from_settings()

    @property
    def rates(self) -> BillingRates:
        return self._rates

    async def calculate_monthly_bill(self, company_id: str, month: str) -> CompanyBilling:
        """
        Рассчитывает счёт компании за месяц.

        Учитываются только активные такси. Выручка — сумма fare
        поездок компании за месяц.

        Raises:
            ValueError: неверный формат месяца
            httpx.HTTPStatusError: ошибка backend
        """
        due_date = calculate_due_date(month, self._rates.due_day)

        taxis = await self.get_taxi_list(company_id)
        active_taxis = [taxi for taxi in taxis if taxi.get("status", "active") == "active"]
        rides = await self._api.get(f"/companies/{company_id}/rides", params={"month": month}) or []

        taxi_fees = round(len(active_taxis) * self._rates.taxi_monthly_fee, 2)
        revenue = round(sum(float(ride.get("fare", 0)) for ride in rides), 2)
        commission = round(revenue * self._rates.ride_commission_percent / 100, 2)

        billing = CompanyBilling(
            company_id=company_id,
            month=month,
            active_taxis=len(active_taxis),
            taxi_fees=taxi_fees,
            total_rides=len(rides),
            total_ride_revenue=revenue,
            commission_percent=self._rates.ride_commission_percent,
            commission_amount=commission,
            total_due=round(taxi_fees + commission, 2),
            due_date=due_date,
        )

        await log_info(
            f"Счёт {company_id} за {month}: {billing.total_due:.2f} EUR",
            type_msg=TypeMsg.INFO,
            logger_name=LOGGER_NAME,
            extra={"company_id": company_id, "month": month, "total_due": billing.total_due},
        )
        return billing

    async def get_taxi_list(self, company_id: str) -> List[dict[str, Any]]:
        """Такси компании (все статусы)."""
        return await self._api.get(f"/companies/{company_id}/taxis") or []

    async def get_billing_history(self, company_id: str, months: List[str]) -> List[CompanyBilling]:
        """Счета компании за перечисленные месяцы."""
        return [await self.calculate_monthly_bill(company_id, month) for month in months]

    async def mark_as_paid(self, company_id: str, month: str) -> None:
        await self._api.post(f"/companies/{company_id}/billing/{month}/paid")
        await log_info(
            f"Счёт {company_id} за {month} отмечен оплаченным",
            type_msg=TypeMsg.INFO,
            logger_name=LOGGER_NAME,
        )

    def generate_invoice(self, billing: CompanyBilling) -> str:
        """Текст счёта для отправки компании."""
        return "\n".join([
            f"Invoice for {billing.company_id}",
            f"Period: {billing.month}",
            "---------------------------------",
            f"Active Taxis: {billing.active_taxis}",
            f"Taxi Fees: €{billing.taxi_fees:.2f}",
            "",
            f"Total Rides: {billing.total_rides}",
            f"Total Ride Revenue: €{billing.total_ride_revenue:.2f}",
            f"Commission ({billing.commission_percent:g}%): €{billing.commission_amount:.2f}",
            "",
            f"Total Due: €{billing.total_due:.2f}",
            f"Due Date: {billing.due_date.isoformat()}",
        ])
