# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import asyncio
import json
import os
import time
from pathlib import Path
from typing import Any, AsyncGenerator, Callable
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("API_TOKEN", "")

from src.realtime.client import RealtimeClient


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "PROJECT_NAME": "lux_taxi_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "colored",
        "LOG_MAX_BYTES": 1048576,
        "LOG_BACKUP_COUNT": 1,
        "WS_URL": "",
        "WS_PAGE_URL": "http://localhost:3000",
        "WS_PATH": "/ws",
        "WEBSOCKET_RECONNECT_ATTEMPTS": 3,
        "WEBSOCKET_RECONNECT_INTERVAL": 0.01,
        "HEARTBEAT_INTERVAL": 30.0,
        "WS_OPEN_TIMEOUT": 1.0,
        "API_URL": "http://localhost:3000/api",
        "API_TIMEOUT": 5.0,
        "API_TOKEN": "",
        "BASE_RATE": 5.00,
        "PER_KM_RATE": 3.65,
        "PER_MINUTE_RATE": 0.50,
        "MIN_FARE": 10.00,
        "CURRENCY": "EUR",
        "PER_KM_RATES": {"economy": 3.65, "comfort": 4.50, "premium": 5.75, "van": 6.50},
        "TAXI_MONTHLY_FEE": 10.00,
        "RIDE_COMMISSION_PERCENT": 10.0,
        "DRIVER_COMMISSION_PERCENT": 15.0,
        "BILLING_DUE_DAY": 10,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Временный config.json."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config), encoding="utf-8")
    return config_file


# =============================================================================
# ФЕЙКОВЫЙ ТРАНСПОРТ
# =============================================================================

_CLOSE = object()


class FakeSocket:
    """
    WebSocket в памяти.

    feed() доставляет кадр от сервера, drop() имитирует закрытие
    соединения сервером, close() закрывает его со стороны клиента.
    """

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.close_calls = 0
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def close(self) -> None:
        self.close_calls += 1
        if not self.closed:
            self.closed = True
            self._incoming.put_nowait(_CLOSE)

    def feed(self, raw: str | bytes | dict) -> None:
        if isinstance(raw, dict):
            raw = json.dumps(raw)
        self._incoming.put_nowait(raw)

    def drop(self) -> None:
        self.closed = True
        self._incoming.put_nowait(_CLOSE)

    def fail(self, error: Exception) -> None:
        """Обрыв с ошибкой транспорта."""
        self.closed = True
        self._incoming.put_nowait(error)

    def sent_frames(self) -> list[dict]:
        return [json.loads(frame) for frame in self.sent]

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self) -> str | bytes:
        item = await self._incoming.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item


class FakeSocketFactory:
    """Фабрика соединений: можно заставить ближайшие попытки падать."""

    def __init__(self) -> None:
        self.sockets: list[FakeSocket] = []
        self.urls: list[str] = []
        self.fail_next = 0
        self.always_fail = False
        self.error: Exception = ConnectionRefusedError("Connection refused")

    @property
    def calls(self) -> int:
        return len(self.urls)

    @property
    def last(self) -> FakeSocket:
        return self.sockets[-1]

    async def __call__(self, url: str) -> FakeSocket:
        self.urls.append(url)
        if self.always_fail:
            raise self.error
        if self.fail_next > 0:
            self.fail_next -= 1
            raise self.error
        socket = FakeSocket()
        self.sockets.append(socket)
        return socket


@pytest.fixture
def socket_factory() -> FakeSocketFactory:
    return FakeSocketFactory()


@pytest.fixture
def fake_socket() -> Callable[[], FakeSocket]:
    """Конструктор отдельного FakeSocket для тестов со своей фабрикой."""
    return FakeSocket


@pytest.fixture
def callbacks() -> dict[str, AsyncMock]:
    """Колбэки on_open / on_close / on_error."""
    return {"on_open": AsyncMock(), "on_close": AsyncMock(), "on_error": AsyncMock()}


@pytest.fixture
def make_client(
    socket_factory: FakeSocketFactory,
    callbacks: dict[str, AsyncMock],
) -> Callable[..., RealtimeClient]:
    """Создаёт клиент на фейковом транспорте с короткими интервалами."""

    def factory(**overrides: Any) -> RealtimeClient:
        options: dict[str, Any] = {
            "url": "ws://test.local/ws",
            "reconnect_attempts": 3,
            "reconnect_interval": 0.03,
            "heartbeat_interval": 60.0,
            "socket_factory": socket_factory,
            **callbacks,
        }
        options.update(overrides)
        return RealtimeClient(**options)

    return factory


@pytest_asyncio.fixture
async def client(make_client: Callable[..., RealtimeClient]) -> AsyncGenerator[RealtimeClient, None]:
    """Клиент, который гарантированно отключается после теста."""
    realtime = make_client()
    yield realtime
    await realtime.disconnect()


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    """Ожидание условия с таймаутом для асинхронных сценариев."""

    async def waiter(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError("Условие не выполнено за отведённое время")
            await asyncio.sleep(0.002)

    return waiter


# =============================================================================
# ФИКСТУРЫ ДАННЫХ
# =============================================================================

@pytest.fixture
def sample_ride_payload() -> dict[str, Any]:
    """Поездка в формате backend (camelCase)."""
    return {
        "id": "ride-42",
        "request": {
            "pickupLocation": {"address": "Place d'Armes, Luxembourg", "coordinates": [49.6116, 6.1300]},
            "dropoffLocation": {"address": "Findel Airport", "coordinates": [49.6233, 6.2044]},
        },
        "driver": {
            "id": "drv-7",
            "name": "Jean Muller",
            "phone": "+352 621 000 000",
            "vehicle": {"make": "Toyota", "model": "Prius", "licensePlate": "LX 1234"},
        },
        "status": "accepted",
        "createdAt": "2024-05-01T10:00:00Z",
        "updatedAt": "2024-05-01T10:02:00Z",
    }


@pytest.fixture
def sample_location_payload() -> dict[str, Any]:
    return {"coordinates": [49.61, 6.13], "heading": 90, "speed": 32.5, "timestamp": 1714557600000}
