# src/shared/models/messages.py
"""
Формат кадров realtime-канала.

Каждый кадр (входящий и исходящий) имеет вид {"type": <str>, "payload": <any>}.
"""

from __future__ import annotations

import json
import time
from typing import Any

from pydantic import BaseModel, Field

from src.common.constants import MessageType


class Envelope(BaseModel):
    """Конверт кадра."""
    type: str = Field(min_length=1)
    payload: Any = None

    def to_wire(self) -> str:
        """Сериализует кадр в JSON-строку."""
        return json.dumps({"type": self.type, "payload": self.payload})

    @classmethod
    def from_wire(cls, raw: str | bytes) -> "Envelope":
        """
        Разбирает кадр.

        Raises:
            ValueError: если кадр не JSON или не имеет формы конверта
                (pydantic.ValidationError — подкласс ValueError)
        """
        try:
            data = json.loads(raw)
        except RecursionError:
            raise ValueError("Слишком глубокая вложенность кадра") from None
        if not isinstance(data, dict):
            raise ValueError(f"Кадр должен быть объектом, получено: {type(data).__name__}")
        return cls.model_validate(data)


class HeartbeatPayload(BaseModel):
    """Полезная нагрузка heartbeat-пробы и ответа на неё."""
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))


def heartbeat_envelope() -> Envelope:
    """Проба живости соединения с текущим временем в миллисекундах."""
    return Envelope(type=MessageType.HEARTBEAT.value, payload=HeartbeatPayload().model_dump())


# Типы, которые подтверждают живость соединения и не маршрутизируются
HEARTBEAT_RESPONSE_TYPES = frozenset({MessageType.HEARTBEAT_ACK.value, MessageType.HEARTBEAT.value})
