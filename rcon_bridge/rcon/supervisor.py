"""
Супервизор RCON подключения
Первичное подключение, автоматическое переподключение после обрыва и ручное
переподключение по кнопке/команде
"""
import asyncio
import logging
from typing import Callable, Optional, Protocol

from rcon_bridge.rcon.connection import ConnectionConfig, TransportError
from rcon_bridge.rcon.status import ConnectionState, ConnectionStatus

logger = logging.getLogger(__name__)

# Пауза перед ручным переподключением (мс)
MANUAL_RECONNECT_DELAY = 500

# Результат команды, на которую сервер ничего не ответил
NO_OUTPUT = None


class CommandError(Exception):
    """Команда не выполнена (нет подключения или сервер отклонил отправку)"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RemoteConnection(Protocol):
    connected: bool

    async def connect(self) -> None: ...

    async def send(self, text: str) -> str: ...

    async def close(self) -> None: ...

    def on_disconnect(self, handler: Callable[[], None]) -> None: ...


class StatusSink(Protocol):
    def update(self, status: ConnectionStatus) -> None: ...


class Clock(Protocol):
    async def sleep(self, millis: int) -> None: ...


class AsyncioClock:
    async def sleep(self, millis: int) -> None:
        await asyncio.sleep(millis / 1000)


class ConnectionSupervisor:
    """
    Владеет одним RCON подключением на все время жизни

    Флаг fatal выставлен, пока статус FAILED: в этом состоянии восстановлением
    занимается только ручное переподключение, и обработчик обрыва ничего не
    делает. Все попытки подключения выполняются под self._reconnect_lock, так что
    автоматический цикл и ручное переподключение не идут одновременно.
    """

    def __init__(
        self,
        connection: RemoteConnection,
        config: ConnectionConfig,
        sink: StatusSink,
        clock: Optional[Clock] = None,
    ):
        self.connection = connection
        self.config = config
        self.sink = sink
        self.clock = clock or AsyncioClock()

        self.fatal = False
        self.disposed = False
        self._status = ConnectionStatus.connecting()
        self._reconnect_lock = asyncio.Lock()
        self._retry_task: Optional[asyncio.Task] = None

        self.connection.on_disconnect(self._handle_disconnect)

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def state(self) -> ConnectionState:
        return self._status.state

    def _publish(self, status: ConnectionStatus):
        if self.disposed:
            return
        self._status = status
        self.sink.update(status)

    def _fail(self, reason: str):
        self.fatal = True
        self._publish(ConnectionStatus.failed(reason, self.manual_reconnect))

    async def start(self):
        """Первичное подключение, без повторных попыток"""
        if self.disposed:
            logger.debug("Супервизор уже закрыт, подключение пропущено")
            return

        async with self._reconnect_lock:
            try:
                await self.connection.connect()
            except TransportError as e:
                logger.error(f"✗ Не удалось подключиться к RCON: {e}")
                self._fail(f"Не удалось подключиться к RCON {e}")
                return

            if await self._closed_after_connect():
                return
            self.fatal = False
            self._publish(ConnectionStatus.connected())

    async def manual_reconnect(self):
        """Ровно одна попытка подключения по запросу пользователя"""
        if self.disposed:
            logger.debug("Супервизор уже закрыт, переподключение пропущено")
            return

        async with self._reconnect_lock:
            if self.disposed:
                return

            logger.info("Ручное переподключение к RCON")
            self.fatal = False
            self._publish(ConnectionStatus.reconnecting())
            await self.clock.sleep(MANUAL_RECONNECT_DELAY)
            if self.disposed:
                return

            try:
                await self.connection.connect()
            except TransportError as e:
                logger.warning(f"Ручное переподключение к RCON не удалось: {e}")
                self._fail(f"Переподключение к RCON не удалось {e}")
                return

            if await self._closed_after_connect():
                return
            self.fatal = False
            self._publish(ConnectionStatus.connected())
            logger.info("✓ RCON переподключен вручную")

    def _handle_disconnect(self):
        if self.disposed or self.fatal:
            return
        if self._retry_task is not None and not self._retry_task.done():
            logger.debug("Автоматическое переподключение уже выполняется")
            return
        self._retry_task = asyncio.create_task(self.on_unsolicited_disconnect())

    async def on_unsolicited_disconnect(self):
        """Ограниченный цикл автоматического переподключения после обрыва"""
        if self.disposed or self.fatal:
            return

        async with self._reconnect_lock:
            # Пока ждали блокировку, подключение могли восстановить вручную
            if self.disposed or self.fatal or self.connection.connected:
                return

            max_retry = self.config.max_retry
            for attempt in range(1, max_retry + 1):
                self._publish(ConnectionStatus.reconnecting(attempt, max_retry))
                await self.clock.sleep(self.config.retry_interval)
                if self.disposed:
                    return

                try:
                    await self.connection.connect()
                except TransportError as e:
                    logger.warning(f"Переподключение к RCON не удалось, осталось попыток: {max_retry - attempt} ({e})")
                    continue

                if await self._closed_after_connect():
                    return
                self.fatal = False
                self._publish(ConnectionStatus.connected())
                logger.info("✓ RCON успешно переподключен")
                return

            logger.error(f"✗ RCON отключен, выполнено попыток переподключения: {max_retry}")
            self._fail(f"RCON отключен, выполнено попыток переподключения: {max_retry}")

    async def _closed_after_connect(self) -> bool:
        """Если супервизор закрыли во время подключения, закрываем новое соединение"""
        if not self.disposed:
            return False
        await self._close_quietly()
        return True

    async def send_command(self, text: str) -> Optional[str]:
        """
        Отправка команды на сервер

        Returns:
            Ответ сервера или NO_OUTPUT, если ответ пустой
        """
        if self.disposed:
            raise CommandError("RCON подключение закрыто")

        try:
            reply = await self.connection.send(text)
        except TransportError as e:
            raise CommandError(str(e)) from e

        return reply if reply else NO_OUTPUT

    async def dispose(self):
        """Закрытие подключения, ошибки игнорируются"""
        if self.disposed:
            return
        self._publish(ConnectionStatus.disposed())
        self.disposed = True
        self.fatal = False

        task, self._retry_task = self._retry_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        await self._close_quietly()

    async def _close_quietly(self):
        try:
            await self.connection.close()
        except Exception as e:
            logger.debug(f"Ошибка при закрытии RCON подключения: {e}")
