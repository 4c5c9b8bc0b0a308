# src/realtime/router.py
"""
Маршрутизатор входящих сообщений.
Один обработчик на тип сообщения, последняя регистрация побеждает.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from src.common.logger import log_debug, log_error, log_warning


MessageHandler = Callable[[Any], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]

LOGGER_NAME = "realtime"


@dataclass
class _Registration:
    handler: MessageHandler
    payload_model: Optional[Type[BaseModel]] = None


class MessageRouter:
    """
    Реестр обработчиков: тип сообщения -> обработчик.

    Если при подписке указана pydantic-модель, payload валидируется
    до вызова обработчика, и обработчик получает экземпляр модели.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, _Registration] = {}

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, message_type: object) -> bool:
        return message_type in self._handlers

    def subscribe(
        self,
        message_type: str,
        handler: MessageHandler,
        payload_model: Optional[Type[BaseModel]] = None,
    ) -> Unsubscribe:
        """
        Регистрирует обработчик для типа сообщения.

        Предыдущий обработчик того же типа заменяется.

        Returns:
            Функция отписки. Удаляет запись, только если она всё ещё
            принадлежит этому обработчику.
        """
        registration = _Registration(handler=handler, payload_model=payload_model)
        self._handlers[message_type] = registration

        def unsubscribe() -> None:
            if self._handlers.get(message_type) is registration:
                del self._handlers[message_type]

        return unsubscribe

    def clear(self) -> None:
        """Удаляет все обработчики."""
        self._handlers.clear()

    async def dispatch(self, message_type: str, payload: Any) -> bool:
        """
        Передаёт payload обработчику типа.

        Returns:
            True, если обработчик был вызван
        """
        registration = self._handlers.get(message_type)
        if registration is None:
            # Неизвестные типы молча игнорируются
            return False

        if registration.payload_model is not None:
            try:
                payload = registration.payload_model.model_validate(payload)
            except ValidationError as e:
                await log_warning(
                    f"Некорректный payload для '{message_type}', кадр отброшен: {e.error_count()} ошибок",
                    logger_name=LOGGER_NAME,
                    extra={"type": message_type},
                )
                return False

        try:
            result = registration.handler(payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            await log_error(
                f"Ошибка в обработчике '{message_type}': {e}",
                logger_name=LOGGER_NAME,
                extra={"type": message_type},
                exc_info=True,
            )
            return True

        await log_debug(f"Сообщение '{message_type}' обработано", logger_name=LOGGER_NAME)
        return True
