# src/services/admin/service.py
"""
Статистика панели администратора.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Union

from src.common.constants import ADMIN_STATS_CHANNEL
from src.infra.api_client import ApiClient
from src.realtime.client import RealtimeClient
from src.realtime.router import Unsubscribe
from src.shared.models.ride import AdminStatsDTO


StatsHandler = Callable[[AdminStatsDTO], Union[None, Awaitable[None]]]


class AdminService:
    """Сводная статистика и её live-обновления."""

    def __init__(self, api: ApiClient, realtime: RealtimeClient) -> None:
        self._api = api
        self._realtime = realtime

    async def get_stats(self) -> AdminStatsDTO:
        data = await self._api.get("/admin/stats")
        return AdminStatsDTO.model_validate(data)

    async def subscribe_to_live_updates(self, on_update: StatsHandler) -> Unsubscribe:
        """
        Подписывает на live-обновления статистики.
        Обновления частичные: заполнены только изменившиеся поля.
        """
        unsubscribe = self._realtime.subscribe(ADMIN_STATS_CHANNEL, on_update, payload_model=AdminStatsDTO)
        await self._realtime.connect()
        return unsubscribe
