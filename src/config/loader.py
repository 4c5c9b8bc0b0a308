# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Адреса и секреты переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "lux_taxi"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Допустимы только colored и json."""
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class RealtimeSettings(BaseModel):
    """Настройки realtime-канала (WebSocket)."""
    # Явный адрес сервера; если пуст — вычисляется из WS_PAGE_URL
    WS_URL: str = ""
    # Адрес страницы/приложения, от которого строится ws(s)://host/path
    WS_PAGE_URL: str = "http://localhost:3000"
    WS_PATH: str = "/ws"
    RECONNECT_ATTEMPTS: int = Field(default=5, ge=0)
    RECONNECT_INTERVAL: float = Field(default=2.0, ge=0)  # секунды
    HEARTBEAT_INTERVAL: float = Field(default=30.0, gt=0)  # секунды
    OPEN_TIMEOUT: float = Field(default=10.0, gt=0)  # секунды


class ApiSettings(BaseModel):
    """Настройки HTTP API."""
    API_URL: str = "/api"
    API_TIMEOUT: float = 10.0
    API_TOKEN: str = ""

    @field_validator("API_TOKEN", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает токен из переменных окружения."""
        if not v:
            return os.getenv("API_TOKEN", "")
        return v


class FareSettings(BaseModel):
    """Настройки тарифов (EUR)."""
    BASE_RATE: float = 5.00
    PER_KM_RATE: float = 3.65
    PER_MINUTE_RATE: float = 0.50
    MIN_FARE: float = 10.00
    CURRENCY: str = "EUR"
    PER_KM_RATES: Dict[str, float] = Field(default_factory=lambda: {
        "economy": 3.65,
        "comfort": 4.50,
        "premium": 5.75,
        "van": 6.50,
    })


class BillingSettings(BaseModel):
    """Настройки биллинга компаний и водителей."""
    TAXI_MONTHLY_FEE: float = 10.00
    RIDE_COMMISSION_PERCENT: float = Field(default=10.0, ge=0, le=100)
    DRIVER_COMMISSION_PERCENT: float = Field(default=15.0, ge=0, le=100)
    DUE_DAY: int = Field(default=10, ge=1, le=28)


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    realtime: RealtimeSettings = Field(default_factory=RealtimeSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    fares: FareSettings = Field(default_factory=FareSettings)
    billing: BillingSettings = Field(default_factory=BillingSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Адреса и секреты переопределяются из переменных окружения.
        """
        config_data = load_config_json()

        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        filtered_data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=filtered_data.get("PROJECT_NAME", "lux_taxi"),
                VERSION=filtered_data.get("VERSION", "1.0.0"),
                DEBUG=filtered_data.get("DEBUG", True),
                ENVIRONMENT=os.getenv("ENVIRONMENT", filtered_data.get("ENVIRONMENT", "development")),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", filtered_data.get("LOG_LEVEL", "DEBUG")),
                LOG_TO_FILE=filtered_data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=filtered_data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=filtered_data.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=filtered_data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=filtered_data.get("LOG_BACKUP_COUNT", 5),
            ),
            realtime=RealtimeSettings(
                WS_URL=os.getenv("WS_URL", filtered_data.get("WS_URL", "")),
                WS_PAGE_URL=os.getenv("WS_PAGE_URL", filtered_data.get("WS_PAGE_URL", "http://localhost:3000")),
                WS_PATH=filtered_data.get("WS_PATH", "/ws"),
                RECONNECT_ATTEMPTS=int(os.getenv(
                    "WEBSOCKET_RECONNECT_ATTEMPTS",
                    filtered_data.get("WEBSOCKET_RECONNECT_ATTEMPTS", 5),
                )),
                RECONNECT_INTERVAL=float(os.getenv(
                    "WEBSOCKET_RECONNECT_INTERVAL",
                    filtered_data.get("WEBSOCKET_RECONNECT_INTERVAL", 2.0),
                )),
                HEARTBEAT_INTERVAL=filtered_data.get("HEARTBEAT_INTERVAL", 30.0),
                OPEN_TIMEOUT=filtered_data.get("WS_OPEN_TIMEOUT", 10.0),
            ),
            api=ApiSettings(
                API_URL=os.getenv("API_URL", filtered_data.get("API_URL", "/api")),
                API_TIMEOUT=filtered_data.get("API_TIMEOUT", 10.0),
                API_TOKEN=os.getenv("API_TOKEN", filtered_data.get("API_TOKEN", "")),
            ),
            fares=FareSettings(
                BASE_RATE=filtered_data.get("BASE_RATE", 5.00),
                PER_KM_RATE=filtered_data.get("PER_KM_RATE", 3.65),
                PER_MINUTE_RATE=filtered_data.get("PER_MINUTE_RATE", 0.50),
                MIN_FARE=filtered_data.get("MIN_FARE", 10.00),
                CURRENCY=filtered_data.get("CURRENCY", "EUR"),
                PER_KM_RATES=filtered_data.get("PER_KM_RATES", FareSettings().PER_KM_RATES),
            ),
            billing=BillingSettings(
                TAXI_MONTHLY_FEE=filtered_data.get("TAXI_MONTHLY_FEE", 10.00),
                RIDE_COMMISSION_PERCENT=filtered_data.get("RIDE_COMMISSION_PERCENT", 10.0),
                DRIVER_COMMISSION_PERCENT=filtered_data.get("DRIVER_COMMISSION_PERCENT", 15.0),
                DUE_DAY=filtered_data.get("BILLING_DUE_DAY", 10),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
