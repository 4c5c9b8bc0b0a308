# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ConnectionState(str, Enum):
    """Состояния realtime-соединения."""
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class MessageType(str, Enum):
    """Зарезервированные типы сообщений протокола."""
    HEARTBEAT = "heartbeat"
    HEARTBEAT_ACK = "heartbeat_ack"
    CONNECTED = "connected"


class RideStatus(str, Enum):
    """Статусы поездки."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    ARRIVED = "arrived"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Каналы realtime-обновлений
RIDE_CHANNEL = "ride:{ride_id}"
DRIVER_LOCATION_CHANNEL = "driver:{driver_id}:location"
ADMIN_STATS_CHANNEL = "admin:stats"


class VehicleClass(str, Enum):
    """Классы автомобилей с собственной ставкой за километр."""
    ECONOMY = "economy"
    COMFORT = "comfort"
    PREMIUM = "premium"
    VAN = "van"


class BillingStatus(str, Enum):
    """Статусы ежемесячного счёта компании."""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
