# tests/config/test_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.config.loader import (
    get_project_root,
    get_config_path,
    load_config_json,
    SystemSettings,
    LoggingSettings,
    RealtimeSettings,
    ApiSettings,
    FareSettings,
    BillingSettings,
    Settings,
)


class TestGetProjectRoot:
    """Тесты для функции get_project_root."""

    def test_returns_path_object(self) -> None:
        """Проверяет, что возвращается объект Path."""
        root = get_project_root()
        assert isinstance(root, Path)

    def test_root_contains_src_directory(self) -> None:
        """Проверяет наличие директории src в корне."""
        root = get_project_root()
        assert (root / "src").exists()

    def test_root_contains_config_directory(self) -> None:
        """Проверяет наличие директории config в корне."""
        root = get_project_root()
        assert (root / "config").exists()


class TestGetConfigPath:
    """Тесты для функции get_config_path."""

    def test_path_ends_with_config_json(self) -> None:
        """Проверяет правильность имени файла."""
        path = get_config_path()
        assert path.name == "config.json"
        assert path.parent.name == "config"


class TestLoadConfigJson:
    """Тесты для функции load_config_json."""

    def test_contains_required_keys(self) -> None:
        """Проверяет наличие обязательных ключей."""
        config = load_config_json()

        required_keys = [
            "PROJECT_NAME",
            "VERSION",
            "LOG_LEVEL",
            "WEBSOCKET_RECONNECT_ATTEMPTS",
            "WEBSOCKET_RECONNECT_INTERVAL",
        ]

        for key in required_keys:
            assert key in config, f"Отсутствует ключ: {key}"

    def test_raises_file_not_found(self, tmp_path: Path) -> None:
        """Проверяет исключение при отсутствии файла."""
        with patch("src.config.loader.get_config_path") as mock_path:
            mock_path.return_value = tmp_path / "nonexistent.json"

            with pytest.raises(FileNotFoundError):
                load_config_json()


class TestSystemSettings:
    """Тесты для модели SystemSettings."""

    def test_default_values(self) -> None:
        """Проверяет значения по умолчанию."""
        settings = SystemSettings()

        assert settings.PROJECT_NAME == "lux_taxi"
        assert settings.DEBUG is True
        assert settings.ENVIRONMENT == "development"


class TestLoggingSettings:
    """Тесты для модели LoggingSettings."""

    def test_default_values(self) -> None:
        """Проверяет значения по умолчанию."""
        settings = LoggingSettings()

        assert settings.LOG_TO_FILE is False
        assert settings.LOG_FILE_PATH == "logs/app.log"
        assert settings.LOG_FORMAT == "colored"
        assert settings.LOG_BACKUP_COUNT == 5

    def test_rejects_unknown_format(self) -> None:
        """Проверяет валидацию формата логов."""
        with pytest.raises(ValidationError):
            LoggingSettings(LOG_FORMAT="xml")


class TestRealtimeSettings:
    """Тесты для модели RealtimeSettings."""

    def test_default_values(self) -> None:
        """Проверяет значения по умолчанию."""
        settings = RealtimeSettings()

        assert settings.WS_URL == ""
        assert settings.WS_PATH == "/ws"
        assert settings.RECONNECT_ATTEMPTS == 5
        assert settings.RECONNECT_INTERVAL == 2.0
        assert settings.HEARTBEAT_INTERVAL == 30.0

    def test_rejects_negative_attempts(self) -> None:
        """Проверяет, что потолок попыток не может быть отрицательным."""
        with pytest.raises(ValidationError):
            RealtimeSettings(RECONNECT_ATTEMPTS=-1)

    def test_rejects_zero_heartbeat(self) -> None:
        """Проверяет, что интервал heartbeat положительный."""
        with pytest.raises(ValidationError):
            RealtimeSettings(HEARTBEAT_INTERVAL=0)


class TestApiSettings:
    """Тесты для модели ApiSettings."""

    def test_token_from_env(self) -> None:
        """Проверяет получение токена из переменных окружения."""
        with patch.dict(os.environ, {"API_TOKEN": "env_token"}):
            settings = ApiSettings(API_TOKEN="")
            assert settings.API_TOKEN == "env_token"

    def test_explicit_token_wins(self) -> None:
        """Проверяет, что явный токен не перезаписывается."""
        with patch.dict(os.environ, {"API_TOKEN": "env_token"}):
            settings = ApiSettings(API_TOKEN="explicit")
            assert settings.API_TOKEN == "explicit"


class TestFareSettings:
    """Тесты для модели FareSettings."""

    def test_default_values(self) -> None:
        """Проверяет тарифы по умолчанию."""
        settings = FareSettings()

        assert settings.BASE_RATE == 5.00
        assert settings.PER_KM_RATE == 3.65
        assert settings.PER_MINUTE_RATE == 0.50
        assert settings.MIN_FARE == 10.00
        assert settings.CURRENCY == "EUR"
        assert settings.PER_KM_RATES["comfort"] == 4.50
        assert settings.PER_KM_RATES["van"] == 6.50


class TestBillingSettings:
    """Тесты для модели BillingSettings."""

    def test_default_values(self) -> None:
        """Проверяет абонплату, комиссии и день оплаты по умолчанию."""
        settings = BillingSettings()

        assert settings.TAXI_MONTHLY_FEE == 10.00
        assert settings.RIDE_COMMISSION_PERCENT == 10.0
        assert settings.DRIVER_COMMISSION_PERCENT == 15.0
        assert settings.DUE_DAY == 10

    def test_commission_over_100_rejected(self) -> None:
        """Проверяет, что комиссия не может превышать 100%."""
        with pytest.raises(ValidationError):
            BillingSettings(RIDE_COMMISSION_PERCENT=120)


class TestSettings:
    """Тесты для главного класса Settings."""

    def test_from_config_json(self) -> None:
        """Проверяет создание настроек из config.json."""
        settings = Settings.from_config_json()

        assert settings.system is not None
        assert settings.logging is not None
        assert settings.realtime is not None
        assert settings.api is not None
        assert settings.fares is not None

    def test_env_overrides_reconnect(self) -> None:
        """Проверяет переопределение параметров переподключения из env."""
        env = {
            "WEBSOCKET_RECONNECT_ATTEMPTS": "3",
            "WEBSOCKET_RECONNECT_INTERVAL": "0.5",
            "WS_URL": "wss://rides.example.lu/ws",
        }
        with patch.dict(os.environ, env):
            settings = Settings.from_config_json()

        assert settings.realtime.RECONNECT_ATTEMPTS == 3
        assert settings.realtime.RECONNECT_INTERVAL == 0.5
        assert settings.realtime.WS_URL == "wss://rides.example.lu/ws"

    def test_comment_keys_ignored(self, mock_config: dict) -> None:
        """Проверяет, что ключи _comment_ не мешают загрузке."""
        mock_config["_comment_test"] = "ignored"
        with patch("src.config.loader.load_config_json", return_value=mock_config):
            settings = Settings.from_config_json()

        assert settings.system.PROJECT_NAME == "lux_taxi_test"
        assert settings.realtime.RECONNECT_ATTEMPTS == 3
