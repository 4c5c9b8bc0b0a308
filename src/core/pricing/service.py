# src/core/pricing/service.py
"""
Расчёт стоимости поездки по тарифу Люксембурга.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Union

from src.common.constants import VehicleClass
from src.shared.models.ride import FareDTO


def _default_per_km_rates() -> Dict[str, float]:
    return {
        VehicleClass.ECONOMY.value: 3.65,
        VehicleClass.COMFORT.value: 4.50,
        VehicleClass.PREMIUM.value: 5.75,
        VehicleClass.VAN.value: 6.50,
    }


@dataclass(frozen=True)
class FareRates:
    """
    Тариф: посадка + за км + за минуту, с минимальной стоимостью.

    per_km_rate применяется, когда класс автомобиля не указан;
    per_km_rates задаёт ставку за км для каждого класса.
    """
    base_rate: float = 5.00
    per_km_rate: float = 3.65
    per_minute_rate: float = 0.50
    min_fare: float = 10.00
    currency: str = "EUR"
    per_km_rates: Dict[str, float] = field(default_factory=_default_per_km_rates)

    def __post_init__(self) -> None:
        for name in ("base_rate", "per_km_rate", "per_minute_rate", "min_fare"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} не может быть отрицательным")
        for vehicle_class, rate in self.per_km_rates.items():
            VehicleClass(vehicle_class)
            if rate < 0:
                raise ValueError(f"Ставка за км для {vehicle_class} не может быть отрицательной")

    def km_rate_for(self, vehicle_class: Union[VehicleClass, str, None] = None) -> float:
        """
        Ставка за километр для класса автомобиля.

        Raises:
            ValueError: неизвестный класс или для класса нет ставки
        """
        if vehicle_class is None:
            return self.per_km_rate
        key = VehicleClass(vehicle_class).value
        if key not in self.per_km_rates:
            raise ValueError(f"Нет ставки за км для класса {key}")
        return self.per_km_rates[key]


class FareCalculator:
    """Калькулятор стоимости поездки."""

    def __init__(self, rates: Optional[FareRates] = None) -> None:
        if rates is None:
            from src.config import settings

            fares = settings.fares
            rates = FareRates(
                base_rate=fares.BASE_RATE,
                per_km_rate=fares.PER_KM_RATE,
                per_minute_rate=fares.PER_MINUTE_RATE,
                min_fare=fares.MIN_FARE,
                currency=fares.CURRENCY,
                per_km_rates=dict(fares.PER_KM_RATES),
            )
        self._rates = rates

    @property
    def rates(self) -> FareRates:
        return self._rates

    def update_rates(self, **changes) -> FareRates:
        """
        Частичное обновление тарифа (например, update_rates(per_km_rate=4.5)).

        Raises:
            TypeError: неизвестное поле тарифа
            ValueError: отрицательное значение
        """
        self._rates = replace(self._rates, **changes)
        return self._rates

    def calculate(
        self,
        distance_km: float,
        duration_minutes: float,
        vehicle_class: Union[VehicleClass, str, None] = None,
    ) -> FareDTO:
        """
        Стоимость = посадка + км * ставка + мин * ставка, но не ниже минимума.
        Ставка за км берётся по классу автомобиля, если он указан.
        Все суммы округляются до центов.
        """
        if distance_km < 0 or duration_minutes < 0:
            raise ValueError("Расстояние и время не могут быть отрицательными")

        rates = self._rates
        distance_fare = distance_km * rates.km_rate_for(vehicle_class)
        time_fare = duration_minutes * rates.per_minute_rate
        subtotal = rates.base_rate + distance_fare + time_fare

        minimum_applied = subtotal < rates.min_fare
        total = max(subtotal, rates.min_fare)

        return FareDTO(
            distance_km=distance_km,
            duration_minutes=duration_minutes,
            vehicle_class=VehicleClass(vehicle_class) if vehicle_class is not None else None,
            base_fare=round(rates.base_rate, 2),
            distance_fare=round(distance_fare, 2),
            time_fare=round(time_fare, 2),
            minimum_applied=minimum_applied,
            total_fare=round(total, 2),
            currency=rates.currency,
        )
