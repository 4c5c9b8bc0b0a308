#!/usr/bin/env python3
# main.py
"""
Главная точка входа Lux Taxi realtime.
Следит за поездкой (и позицией водителя) или за статистикой администратора
и пишет каждое обновление в лог.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import TypeMsg
from src.core.billing.service import BillingService
from src.infra.api_client import ApiClient
from src.realtime.client import RealtimeClient
from src.services.admin.service import AdminService
from src.services.rides.service import RideService
from src.shared.models.ride import AdminStatsDTO, DriverLocationDTO, RideDTO


# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def on_ride_update(ride: RideDTO) -> None:
    driver = ride.driver.name if ride.driver else "не назначен"
    await log_info(
        f"Поездка {ride.id}: статус {ride.status.value}, водитель {driver}",
        type_msg=TypeMsg.INFO,
        extra={"ride_id": ride.id, "status": ride.status.value},
    )


async def on_driver_location(location: DriverLocationDTO) -> None:
    lat, lng = location.coordinates
    await log_info(
        f"Водитель: {lat:.5f}, {lng:.5f}, курс {location.heading:.0f}°",
        type_msg=TypeMsg.DEBUG,
    )


async def on_stats_update(stats: AdminStatsDTO) -> None:
    changed = stats.model_dump(exclude_none=True)
    await log_info(f"Статистика обновлена: {changed}", type_msg=TypeMsg.INFO)


async def run_tracker(ride_id: str, driver_id: str | None = None) -> None:
    """Следит за поездкой до сигнала остановки."""
    async with ApiClient() as api:
        realtime = RealtimeClient()
        rides = RideService(api, realtime)
        try:
            ride = await rides.get_ride_status(ride_id)
            if ride is None:
                await log_error(f"Поездка {ride_id} не найдена")
            else:
                await on_ride_update(ride)

            await rides.subscribe_to_ride_updates(ride_id, on_ride_update)
            if driver_id:
                await rides.subscribe_to_driver_location(driver_id, on_driver_location)

            await _shutdown_event.wait()
        finally:
            rides.close()
            await realtime.disconnect()


async def run_stats() -> None:
    """Следит за статистикой администратора до сигнала остановки."""
    async with ApiClient() as api:
        realtime = RealtimeClient()
        admin = AdminService(api, realtime)
        try:
            await on_stats_update(await admin.get_stats())
            await admin.subscribe_to_live_updates(on_stats_update)
            await _shutdown_event.wait()
        finally:
            await realtime.disconnect()


async def run_billing(company_id: str, month: str) -> None:
    """Считает счёт компании за месяц и пишет его в лог."""
    async with ApiClient() as api:
        billing = BillingService(api)
        invoice = billing.generate_invoice(await billing.calculate_monthly_bill(company_id, month))
        await log_info(f"Счёт сформирован:\n{invoice}", type_msg=TypeMsg.INFO)


async def main(mode: str, *args: str) -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (track, stats, bill)
        args: Аргументы режима
    """
    setup_logging()
    setup_signal_handlers()

    await log_info(
        f"Запуск {settings.system.PROJECT_NAME} v{settings.system.VERSION} в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
    )

    try:
        if mode == "track":
            await run_tracker(*args)
        elif mode == "stats":
            await run_stats()
        elif mode == "bill":
            await run_billing(*args)
        else:
            await log_error(f"Неизвестный режим: {mode}")
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}", exc_info=True)
        raise
    finally:
        await log_info("Работа завершена", type_msg=TypeMsg.INFO)


def print_usage() -> None:
    """Выводит справку по использованию."""
    print("""
Lux Taxi realtime

Использование:
    python main.py track <ride_id> [driver_id]   — обновления поездки (и позиции водителя)
    python main.py stats                         — live-статистика администратора
    python main.py bill <company_id> <YYYY-MM>   — счёт компании за месяц

Переменные окружения:
    WS_URL, WS_PAGE_URL, API_URL, API_TOKEN
    WEBSOCKET_RECONNECT_ATTEMPTS, WEBSOCKET_RECONNECT_INTERVAL
    """)


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1].lower() in ("--help", "-h"):
        print_usage()
        sys.exit(0)

    mode = sys.argv[1].lower()
    if mode == "track" and len(sys.argv) not in (3, 4):
        print("Ошибка: укажите ride_id и, при необходимости, driver_id")
        print_usage()
        sys.exit(1)
    if mode == "bill" and len(sys.argv) != 4:
        print("Ошибка: укажите company_id и месяц в формате YYYY-MM")
        print_usage()
        sys.exit(1)
    if mode not in ("track", "stats", "bill"):
        print(f"Ошибка: неизвестный режим '{mode}'")
        print_usage()
        sys.exit(1)

    try:
        asyncio.run(main(mode, *sys.argv[2:]))
    except KeyboardInterrupt:
        pass
