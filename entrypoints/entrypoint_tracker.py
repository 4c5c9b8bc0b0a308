#!/usr/bin/env python3
# entrypoint_tracker.py
"""
Точка входа для контейнера трекера поездки.
ID поездки и водителя берутся из RIDE_ID и DRIVER_ID.
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from main import main


if __name__ == "__main__":
    ride_id = os.getenv("RIDE_ID")
    if not ride_id:
        print("Ошибка: не задана переменная окружения RIDE_ID")
        sys.exit(1)

    args = [ride_id]
    driver_id = os.getenv("DRIVER_ID")
    if driver_id:
        args.append(driver_id)

    print(f"Запуск трекера поездки {ride_id}...")
    print("Для остановки используйте Ctrl+C")

    try:
        asyncio.run(main("track", *args))
    except KeyboardInterrupt:
        print("\nПолучен сигнал остановки, завершение работы...")
    except Exception as e:
        print(f"\nКритическая ошибка: {e}")
        sys.exit(1)
    finally:
        print("Трекер остановлен")
