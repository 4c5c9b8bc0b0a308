# src/realtime/client.py
"""
Клиент realtime-канала обновлений поездок.

Держит одно WebSocket-соединение, переподключается после обрывов,
проверяет живость heartbeat-ом и раздаёт входящие сообщения
подписчикам по типу.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, Protocol, Type, Union
from urllib.parse import urlsplit, urlunsplit

import websockets
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosed

from src.common.constants import ConnectionState, TypeMsg
from src.common.logger import log_debug, log_error, log_info, log_warning
from src.realtime.heartbeat import HeartbeatMonitor
from src.realtime.reconnect import ReconnectionPolicy
from src.realtime.router import MessageHandler, MessageRouter, Unsubscribe
from src.shared.models.messages import (
    HEARTBEAT_RESPONSE_TYPES,
    Envelope,
    heartbeat_envelope,
)


LOGGER_NAME = "realtime"


class Socket(Protocol):
    """Минимальный интерфейс транспорта (совместим с websockets)."""

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> Any: ...


SocketFactory = Callable[[str], Awaitable[Socket]]
Callback = Callable[..., Union[None, Awaitable[None]]]


# =============================================================================
# АДРЕС СЕРВЕРА
# =============================================================================

_WS_SCHEMES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


def resolve_ws_url(
    page_url: str | None,
    override: str | None = None,
    path: str = "/ws",
) -> str:
    """
    Определяет адрес WebSocket-сервера.

    Явный override имеет приоритет. Иначе адрес строится из адреса
    страницы: http -> ws, https -> wss, хост и порт сохраняются.

    Raises:
        ValueError: неизвестная схема или адрес не задан
    """
    if override:
        parts = urlsplit(override)
        scheme = _WS_SCHEMES.get(parts.scheme)
        if scheme is None or not parts.netloc:
            raise ValueError(f"Некорректный адрес WebSocket: {override}")
        return urlunsplit(parts._replace(scheme=scheme))

    if not page_url:
        raise ValueError("Не задан ни адрес WebSocket, ни адрес страницы")

    parts = urlsplit(page_url)
    scheme = _WS_SCHEMES.get(parts.scheme)
    if scheme is None or not parts.netloc:
        raise ValueError(f"Некорректный адрес страницы: {page_url}")

    if not path.startswith("/"):
        path = "/" + path
    return urlunsplit((scheme, parts.netloc, path, "", ""))


# =============================================================================
# КЛИЕНТ
# =============================================================================

class RealtimeClient:
    """
    Переподключающийся WebSocket-клиент.

    Экземпляр создаётся явно и передаётся тем, кому нужен канал
    (RideService, AdminService). Одно открытое соединение на экземпляр.

    Жизненный цикл:
        connect() -> open -> heartbeat -> сообщения -> close -> политика переподключения
        disconnect() останавливает всё и очищает подписки.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        page_url: str | None = None,
        reconnect_attempts: int | None = None,
        reconnect_interval: float | None = None,
        heartbeat_interval: float | None = None,
        open_timeout: float | None = None,
        on_open: Optional[Callback] = None,
        on_close: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
        socket_factory: Optional[SocketFactory] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            url: Явный адрес сервера (иначе WS_URL из конфига или адрес страницы)
            page_url: Адрес страницы, от которого строится ws(s)://
            reconnect_attempts: Потолок попыток переподключения
            reconnect_interval: Задержка между попытками, секунды
            heartbeat_interval: Период heartbeat, секунды
            open_timeout: Таймаут рукопожатия, секунды
            on_open: Вызывается после открытия соединения
            on_close: Вызывается после закрытия соединения
            on_error: Вызывается с исключением при ошибке транспорта
            socket_factory: Открывает транспорт по адресу (по умолчанию websockets)
            clock: Монотонные часы для heartbeat
        """
        from src.config import settings

        config = settings.realtime

        self._url = resolve_ws_url(
            page_url or config.WS_PAGE_URL,
            url or config.WS_URL or None,
            path=config.WS_PATH,
        )
        self._open_timeout = open_timeout if open_timeout is not None else config.OPEN_TIMEOUT
        self._socket_factory = socket_factory or self._open_websocket

        self._on_open = on_open
        self._on_close = on_close
        self._on_error = on_error

        self._router = MessageRouter()
        self._policy = ReconnectionPolicy(
            max_attempts=reconnect_attempts if reconnect_attempts is not None else config.RECONNECT_ATTEMPTS,
            interval=reconnect_interval if reconnect_interval is not None else config.RECONNECT_INTERVAL,
        )
        self._heartbeat = HeartbeatMonitor(
            interval=heartbeat_interval if heartbeat_interval is not None else config.HEARTBEAT_INTERVAL,
            send_probe=self._send_heartbeat,
            on_stale=self._force_reconnect,
            is_open=lambda: self._state is ConnectionState.OPEN,
            clock=clock,
        )

        self._ws: Socket | None = None
        self._state = ConnectionState.IDLE
        # Номер текущего соединения: колбэки старых соединений сверяют его и ничего не делают
        self._generation = 0
        self._reader_task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Свойства
    # -------------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def reconnect_count(self) -> int:
        """Попыток переподключения с последнего успешного открытия."""
        return self._policy.attempts

    @property
    def last_heartbeat(self) -> float | None:
        return self._heartbeat.last_ack

    @property
    def heartbeat(self) -> HeartbeatMonitor:
        return self._heartbeat

    @property
    def policy(self) -> ReconnectionPolicy:
        return self._policy

    @property
    def router(self) -> MessageRouter:
        return self._router

    # -------------------------------------------------------------------------
    # Публичный API
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """
        Открывает соединение.

        Ничего не делает, если соединение уже открыто или открывается.
        Ошибка открытия не пробрасывается: она уходит в on_error,
        после чего срабатывает обычный путь закрытия и переподключения.
        """
        if self._state in (ConnectionState.OPEN, ConnectionState.CONNECTING):
            return

        self._state = ConnectionState.CONNECTING
        self._generation += 1
        generation = self._generation

        await log_info(f"Подключение к {self._url}...", type_msg=TypeMsg.DEBUG, logger_name=LOGGER_NAME)

        try:
            ws = await self._socket_factory(self._url)
        except Exception as e:
            if generation != self._generation:
                return
            await self._handle_error(e)
            await self._handle_close(generation)
            return

        if generation != self._generation:
            # disconnect() во время рукопожатия
            await self._close_socket(ws)
            return

        self._ws = ws
        await self._handle_open(generation)
        if generation == self._generation:
            self._reader_task = asyncio.create_task(self._read_loop(ws, generation))

    async def disconnect(self) -> None:
        """
        Закрывает соединение и очищает подписки.

        Останавливает heartbeat, отменяет запланированное переподключение,
        сбрасывает счётчик попыток. Идемпотентен. on_close не вызывается.
        """
        # Всё состояние меняется до первого await
        self._generation += 1
        self._heartbeat.stop()
        self._policy.cancel()
        self._policy.reset()
        self._router.clear()

        ws, self._ws = self._ws, None
        reader, self._reader_task = self._reader_task, None
        if self._state is not ConnectionState.IDLE:
            self._state = ConnectionState.CLOSED

        if reader is not None and not reader.done() and reader is not asyncio.current_task():
            reader.cancel()

        if ws is not None:
            await self._close_socket(ws)
            await log_info("WebSocket отключён", logger_name=LOGGER_NAME)

    def subscribe(
        self,
        message_type: str,
        handler: MessageHandler,
        payload_model: Optional[Type[BaseModel]] = None,
    ) -> Unsubscribe:
        """
        Подписывает обработчик на тип сообщения (заменяя прежний).

        Returns:
            Функция отписки
        """
        return self._router.subscribe(message_type, handler, payload_model)

    async def send(self, message_type: str, payload: Any = None) -> bool:
        """
        Отправляет {"type": ..., "payload": ...}, если соединение открыто.

        Сообщения не ставятся в очередь: при закрытом соединении
        ошибка логируется и возвращается False.
        """
        ws = self._ws
        if self._state is not ConnectionState.OPEN or ws is None:
            await log_error(
                f"WebSocket не подключён, сообщение '{message_type}' не отправлено",
                logger_name=LOGGER_NAME,
                extra={"state": self._state.value},
            )
            return False

        frame = Envelope(type=message_type, payload=payload).to_wire()
        try:
            await ws.send(frame)
        except ConnectionClosed as e:
            await log_error(
                f"Соединение закрыто во время отправки '{message_type}': {e}",
                logger_name=LOGGER_NAME,
            )
            return False
        return True

    async def __aenter__(self) -> "RealtimeClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    # -------------------------------------------------------------------------
    # Реакции на события транспорта
    # -------------------------------------------------------------------------

    async def _handle_open(self, generation: int) -> None:
        self._state = ConnectionState.OPEN
        self._policy.reset()
        self._heartbeat.start()
        await log_info("WebSocket подключён", logger_name=LOGGER_NAME, extra={"url": self._url})
        await self._invoke(self._on_open)

    async def _handle_close(self, generation: int) -> None:
        if generation != self._generation:
            return

        self._state = ConnectionState.CLOSED
        self._ws = None
        self._reader_task = None
        self._heartbeat.stop()
        await log_info("WebSocket отключён", logger_name=LOGGER_NAME)

        await self._invoke(self._on_close)

        # on_close мог вызвать disconnect()
        if generation != self._generation:
            return
        await self._policy.schedule(lambda: self._reconnect(generation))

    async def _handle_error(self, error: BaseException) -> None:
        await log_error(f"Ошибка WebSocket: {error!r}", logger_name=LOGGER_NAME)
        await self._invoke(self._on_error, error)

    async def _handle_message(self, raw: str | bytes) -> None:
        try:
            envelope = Envelope.from_wire(raw)
        except ValueError as e:
            await log_error(f"Ошибка разбора сообщения WebSocket: {e}", logger_name=LOGGER_NAME)
            return

        if envelope.type in HEARTBEAT_RESPONSE_TYPES:
            self._heartbeat.record_ack()
            return

        await self._router.dispatch(envelope.type, envelope.payload)

    # -------------------------------------------------------------------------
    # Внутреннее
    # -------------------------------------------------------------------------

    async def _read_loop(self, ws: Socket, generation: int) -> None:
        try:
            async for raw in ws:
                if generation != self._generation:
                    return
                await self._handle_message(raw)
        except ConnectionClosed as e:
            await log_debug(f"Соединение прервано: {e}", logger_name=LOGGER_NAME)
        except Exception as e:
            await self._close_socket(ws)
            if generation == self._generation:
                await self._handle_error(e)

        await self._handle_close(generation)

    async def _reconnect(self, generation: int) -> None:
        # Пока ждали задержку, могли вызвать disconnect() или connect()
        if generation != self._generation:
            return
        await self.connect()

    async def _send_heartbeat(self) -> bool:
        probe = heartbeat_envelope()
        return await self.send(probe.type, probe.payload)

    async def _force_reconnect(self) -> None:
        """Закрывает транспорт; дальше работает обычный путь on-close."""
        ws = self._ws
        if ws is None:
            return
        # close() может ждать close_timeout: соединение уже считается закрытым
        self._heartbeat.stop()
        self._state = ConnectionState.CLOSED
        await self._close_socket(ws)

    async def _close_socket(self, ws: Socket) -> None:
        try:
            await ws.close()
        except Exception as e:
            await log_warning(f"Ошибка при закрытии WebSocket: {e!r}", logger_name=LOGGER_NAME)

    async def _invoke(self, callback: Optional[Callback], *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            await log_error(f"Ошибка в пользовательском колбэке: {e}", logger_name=LOGGER_NAME, exc_info=True)

    async def _open_websocket(self, url: str) -> Socket:
        return await websockets.connect(url, open_timeout=self._open_timeout, ping_interval=None)
