# src/services/rides/service.py
"""
Сервис поездок на стороне клиента.
HTTP-запросы к API и live-обновления поездки и позиции водителя через realtime-канал.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Union

from src.common.constants import DRIVER_LOCATION_CHANNEL, RIDE_CHANNEL, TypeMsg
from src.common.logger import log_info
from src.infra.api_client import ApiClient
from src.realtime.client import RealtimeClient
from src.realtime.router import Unsubscribe
from src.shared.models.ride import DriverLocationDTO, RideDTO, RideRequestDTO


RideHandler = Callable[[RideDTO], Union[None, Awaitable[None]]]
LocationHandler = Callable[[DriverLocationDTO], Union[None, Awaitable[None]]]


class RideService:
    """
    Поездки пассажира.

    Держит не более одной подписки на обновления каждой поездки.
    """

    def __init__(self, api: ApiClient, realtime: RealtimeClient) -> None:
        """
        Args:
            api: HTTP-клиент backend API
            realtime: Клиент realtime-канала
        """
        self._api = api
        self._realtime = realtime
        self._ride_subscriptions: dict[str, Unsubscribe] = {}
        self._location_subscriptions: dict[str, Unsubscribe] = {}

    @property
    def active_rides(self) -> list[str]:
        """ID поездок с активной подпиской."""
        return list(self._ride_subscriptions)

    # =========================================================================
    # HTTP
    # =========================================================================

    async def request_ride(self, request: RideRequestDTO) -> RideDTO:
        """Создаёт заказ поездки."""
        data = await self._api.post("/rides", json=request.model_dump(by_alias=True))
        ride = RideDTO.model_validate(data)
        await log_info(f"Поездка заказана: {ride.id}", type_msg=TypeMsg.INFO, extra={"ride_id": ride.id})
        return ride

    async def cancel_ride(self, ride_id: str) -> None:
        """Отменяет поездку и снимает подписку на её обновления."""
        await self._api.post(f"/rides/{ride_id}/cancel")
        self._drop_ride_subscription(ride_id)
        await log_info(f"Поездка отменена: {ride_id}", type_msg=TypeMsg.INFO, extra={"ride_id": ride_id})

    async def get_ride_status(self, ride_id: str) -> Optional[RideDTO]:
        data = await self._api.get_or_none(f"/rides/{ride_id}")
        return RideDTO.model_validate(data) if data is not None else None

    async def get_driver_location(self, driver_id: str) -> Optional[DriverLocationDTO]:
        data = await self._api.get_or_none(f"/drivers/{driver_id}/location")
        return DriverLocationDTO.model_validate(data) if data is not None else None

    # =========================================================================
    # Realtime
    # =========================================================================

    async def subscribe_to_ride_updates(self, ride_id: str, on_update: RideHandler) -> Unsubscribe:
        """
        Подписывает на обновления поездки и подключает realtime-канал.

        Прежняя подписка на ту же поездку снимается.

        Returns:
            Функция отписки
        """
        self._drop_ride_subscription(ride_id)

        unsubscribe = self._realtime.subscribe(
            RIDE_CHANNEL.format(ride_id=ride_id),
            on_update,
            payload_model=RideDTO,
        )
        self._ride_subscriptions[ride_id] = unsubscribe

        await self._realtime.connect()

        def unsubscribe_ride() -> None:
            self._drop_ride_subscription(ride_id, unsubscribe)

        return unsubscribe_ride

    async def subscribe_to_driver_location(self, driver_id: str, on_update: LocationHandler) -> Unsubscribe:
        """Подписывает на позицию водителя и подключает realtime-канал."""
        previous = self._location_subscriptions.pop(driver_id, None)
        if previous is not None:
            previous()

        unsubscribe = self._realtime.subscribe(
            DRIVER_LOCATION_CHANNEL.format(driver_id=driver_id),
            on_update,
            payload_model=DriverLocationDTO,
        )
        self._location_subscriptions[driver_id] = unsubscribe

        await self._realtime.connect()

        def unsubscribe_location() -> None:
            if self._location_subscriptions.get(driver_id) is unsubscribe:
                del self._location_subscriptions[driver_id]
                unsubscribe()

        return unsubscribe_location

    def close(self) -> None:
        """Снимает все подписки сервиса."""
        for ride_id in list(self._ride_subscriptions):
            self._drop_ride_subscription(ride_id)
        for unsubscribe in self._location_subscriptions.values():
            unsubscribe()
        self._location_subscriptions.clear()

    def _drop_ride_subscription(self, ride_id: str, expected: Optional[Unsubscribe] = None) -> None:
        current = self._ride_subscriptions.get(ride_id)
        if current is None:
            return
        # Устаревшая функция отписки не снимает более новую подписку
        if expected is not None and current is not expected:
            return
        del self._ride_subscriptions[ride_id]
        current()
