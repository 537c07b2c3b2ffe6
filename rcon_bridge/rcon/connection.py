"""
Source RCON подключение поверх библиотеки rcon
Блокирующие вызовы сокета выполняются в отдельном потоке, потеря соединения
передается подписчикам on_disconnect
"""
import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from rcon.exceptions import EmptyResponse, SessionTimeout
from rcon.source import Client

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 25575
DEFAULT_MAX_RETRY = 3
DEFAULT_RETRY_INTERVAL = 1000  # мс


@dataclass(frozen=True)
class ConnectionConfig:
    """Параметры подключения, не меняются за время жизни супервизора"""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    password: str = ""
    max_retry: int = DEFAULT_MAX_RETRY
    retry_interval: int = DEFAULT_RETRY_INTERVAL
    timeout: float = 10.0
    keepalive_interval: float = 30.0
    keepalive_command: str = "list"

    def __post_init__(self):
        if self.max_retry < 0:
            raise ValueError(f"max_retry не может быть отрицательным: {self.max_retry}")
        if self.retry_interval < 0:
            raise ValueError(f"retry_interval не может быть отрицательным: {self.retry_interval}")
        if self.keepalive_interval < 0:
            raise ValueError(f"keepalive_interval не может быть отрицательным: {self.keepalive_interval}")


class TransportError(Exception):
    """Ошибка подключения/отправки/закрытия на уровне протокола"""

    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
        self.message = message

    @classmethod
    def from_exception(cls, exc: BaseException) -> "TransportError":
        return cls(type(exc).__name__, str(exc) or "без описания")


class SourceRCONConnection:
    """
    Одно постоянное Source RCON подключение

    На каждое подключение создается новый rcon.source.Client. Все обращения к
    сокету идут под self._lock, поэтому команды и keepalive не пересекаются.
    """

    def __init__(self, config: ConnectionConfig, client_factory: Callable[..., Client] = Client):
        self.config = config
        self._client_factory = client_factory
        self._client: Optional[Client] = None
        self._lock = asyncio.Lock()
        self._handlers: List[Callable[[], None]] = []
        self._keepalive_task: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    def on_disconnect(self, handler: Callable[[], None]):
        """Подписка на потерю соединения (обработчик вызывается в event loop)"""
        self._handlers.append(handler)

    async def connect(self):
        await self._stop_keepalive()
        async with self._lock:
            # Закрываем предыдущее подключение если есть, без уведомления подписчиков
            self._discard_client()

            logger.info(f"Подключение к RCON {self.config.host}:{self.config.port}...")
            try:
                client = await asyncio.to_thread(self._open_client)
            except Exception as e:
                raise TransportError.from_exception(e) from e
            self._client = client

        logger.info(f"✓ RCON подключен к {self.config.host}:{self.config.port}")
        if self.config.keepalive_interval > 0:
            self._keepalive_task = asyncio.create_task(self._keepalive_loop(client))

    def _open_client(self) -> Client:
        client = self._client_factory(
            self.config.host,
            self.config.port,
            timeout=self.config.timeout,
            passwd=self.config.password,
        )
        try:
            client.connect(login=True)
        except BaseException:
            with contextlib.suppress(OSError):
                client.close()
            raise
        return client

    async def send(self, text: str) -> str:
        async with self._lock:
            client = self._client
            if client is None:
                raise TransportError("NotConnected", "RCON клиент не подключен")

            logger.debug(f"Отправка команды '{text}' на RCON сервер")
            try:
                return await asyncio.to_thread(client.run, text)
            except TimeoutError as e:
                # Медленный ответ, соединение считаем живым
                raise TransportError.from_exception(e) from e
            except (OSError, EmptyResponse, SessionTimeout) as e:
                lost = e
            except Exception as e:
                raise TransportError.from_exception(e) from e

        self._connection_lost(client)
        raise TransportError.from_exception(lost) from lost

    async def close(self):
        await self._stop_keepalive()
        async with self._lock:
            client, self._client = self._client, None
            if client is None:
                return
            try:
                await asyncio.to_thread(client.close)
            except Exception as e:
                raise TransportError.from_exception(e) from e

    def _discard_client(self):
        client, self._client = self._client, None
        if client is not None:
            with contextlib.suppress(OSError):
                client.close()

    def _connection_lost(self, client: Client):
        if self._client is not client:
            # Клиент уже заменен новым подключением или закрыт
            return

        self._discard_client()
        logger.warning(f"Соединение с RCON {self.config.host}:{self.config.port} потеряно")

        for handler in list(self._handlers):
            try:
                handler()
            except Exception as e:
                logger.error(f"Ошибка в обработчике отключения RCON: {e}", exc_info=True)

    async def _keepalive_loop(self, client: Client):
        """Периодическая проверка соединения, заменяет событие закрытия сокета"""
        while self._client is client:
            await asyncio.sleep(self.config.keepalive_interval)
            if self._client is not client:
                break
            try:
                await self.send(self.config.keepalive_command)
            except TransportError as e:
                logger.debug(f"Keepalive RCON не прошел: {e}")

    async def _stop_keepalive(self):
        task, self._keepalive_task = self._keepalive_task, None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
