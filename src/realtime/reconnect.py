# src/realtime/reconnect.py
"""
Политика переподключения realtime-канала.
Фиксированная задержка между попытками и ограниченное число попыток.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from src.common.constants import TypeMsg
from src.common.logger import log_info, log_warning


LOGGER_NAME = "realtime"

ConnectCallback = Callable[[], Awaitable[None]]


class ReconnectionPolicy:
    """
    Решает, переподключаться ли после потери соединения.

    Без экспоненциальной задержки и без jitter: задержка одинакова
    для всех попыток.
    """

    def __init__(self, max_attempts: int = 5, interval: float = 2.0) -> None:
        """
        Args:
            max_attempts: Потолок автоматических попыток
            interval: Задержка перед каждой попыткой, секунды
        """
        if max_attempts < 0:
            raise ValueError("max_attempts не может быть отрицательным")
        if interval < 0:
            raise ValueError("interval не может быть отрицательным")

        self.max_attempts = max_attempts
        self.interval = interval
        self._attempts = 0
        self._task: asyncio.Task | None = None

    @property
    def attempts(self) -> int:
        """Количество попыток с момента последнего успешного подключения."""
        return self._attempts

    @property
    def exhausted(self) -> bool:
        """Потолок попыток достигнут."""
        return self._attempts >= self.max_attempts

    @property
    def pending(self) -> bool:
        """Есть запланированная и ещё не выполненная попытка."""
        return self._task is not None and not self._task.done()

    async def schedule(self, connect: ConnectCallback) -> bool:
        """
        Планирует одну отложенную попытку подключения.

        Returns:
            True, если попытка запланирована; False, если потолок достигнут
        """
        if self.exhausted:
            await log_warning(
                f"Достигнут предел попыток переподключения ({self.max_attempts})",
                logger_name=LOGGER_NAME,
            )
            return False

        self._attempts += 1
        await log_info(
            f"Попытка переподключения ({self._attempts}/{self.max_attempts}) через {self.interval} с",
            type_msg=TypeMsg.INFO,
            logger_name=LOGGER_NAME,
        )

        self.cancel()
        self._task = asyncio.create_task(self._delayed(connect))
        return True

    async def _delayed(self, connect: ConnectCallback) -> None:
        await asyncio.sleep(self.interval)
        # Попытка уже стартовала: cancel() из connect() не должен отменить её саму
        self._task = None
        await connect()

    def reset(self) -> None:
        """Сбрасывает счётчик попыток."""
        self._attempts = 0

    def cancel(self) -> None:
        """Отменяет запланированную попытку, если она ещё не стартовала."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
