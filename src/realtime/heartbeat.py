# src/realtime/heartbeat.py
"""
Heartbeat-монитор realtime-канала.
Обнаруживает «тихо умершие» соединения, которые не прислали close.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from src.common.logger import log_warning


LOGGER_NAME = "realtime"


class HeartbeatMonitor:
    """
    Периодически отправляет пробу и проверяет, что ответ приходил
    не позже чем 2 * interval назад.

    Пока ни одного ответа не было, отсчёт ведётся от момента start(),
    поэтому первый интервал после подключения не считается «тишиной».
    """

    def __init__(
        self,
        interval: float,
        send_probe: Callable[[], Awaitable[bool]],
        on_stale: Callable[[], Awaitable[None]],
        is_open: Callable[[], bool],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            interval: Период проверки, секунды
            send_probe: Отправка heartbeat-сообщения
            on_stale: Реакция на зависшее соединение (закрыть транспорт)
            is_open: Открыто ли соединение сейчас
            clock: Монотонные часы
        """
        if interval <= 0:
            raise ValueError("interval должен быть положительным")

        self.interval = interval
        self._send_probe = send_probe
        self._on_stale = on_stale
        self._is_open = is_open
        self._clock = clock

        self._task: asyncio.Task | None = None
        self._started_at: float | None = None
        self._last_ack: float | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_ack(self) -> float | None:
        """Время последнего ответа на heartbeat (по clock)."""
        return self._last_ack

    def start(self) -> None:
        """Запускает периодическую проверку. Повторный запуск перезапускает таймер."""
        self.stop()
        self._started_at = self._clock()
        self._last_ack = None
        self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        """Останавливает таймер. Безопасно вызывать, если он не запускался."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # Из самого тика (on_stale -> close -> stop) задачу не отменяем
        if task is not asyncio.current_task():
            task.cancel()

    def record_ack(self) -> None:
        """Фиксирует получение ответа на heartbeat."""
        self._last_ack = self._clock()

    def is_stale(self, now: float | None = None) -> bool:
        """Нет ответа дольше 2 * interval."""
        reference = self._last_ack if self._last_ack is not None else self._started_at
        if reference is None:
            return False
        if now is None:
            now = self._clock()
        return now - reference > self.interval * 2

    async def tick(self) -> bool:
        """
        Один такт монитора.

        Returns:
            False, если соединение признано зависшим
        """
        if not self._is_open():
            return True

        await self._send_probe()

        if self.is_stale():
            await log_warning(
                f"Нет ответа на heartbeat более {self.interval * 2:.0f} с, переподключение",
                logger_name=LOGGER_NAME,
            )
            await self._on_stale()
            return False
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not await self.tick():
                break
