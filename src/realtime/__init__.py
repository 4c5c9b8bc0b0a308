# src/realtime/__init__.py
"""
Realtime-канал: WebSocket-клиент, heartbeat, переподключение, маршрутизация.
"""

from src.realtime.client import RealtimeClient, resolve_ws_url
from src.realtime.heartbeat import HeartbeatMonitor
from src.realtime.reconnect import ReconnectionPolicy
from src.realtime.router import MessageRouter

__all__ = [
    "RealtimeClient",
    "resolve_ws_url",
    "HeartbeatMonitor",
    "ReconnectionPolicy",
    "MessageRouter",
]
