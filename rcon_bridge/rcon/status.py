"""
Состояния RCON подключения
"""
import enum
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class ConnectionStatus:
    """
    Снимок состояния подключения, который получает StatusSink

    attempt/max_attempts заполнены только при автоматическом переподключении,
    reconnect - только у FAILED (действие для кнопки "Переподключить").
    """
    state: ConnectionState
    attempt: Optional[int] = None
    max_attempts: Optional[int] = None
    reason: Optional[str] = None
    reconnect: Optional[Callable[[], Awaitable[None]]] = field(default=None, compare=False, repr=False)

    @classmethod
    def connecting(cls) -> "ConnectionStatus":
        return cls(ConnectionState.CONNECTING)

    @classmethod
    def connected(cls) -> "ConnectionStatus":
        return cls(ConnectionState.CONNECTED)

    @classmethod
    def reconnecting(cls, attempt: Optional[int] = None, max_attempts: Optional[int] = None) -> "ConnectionStatus":
        return cls(ConnectionState.RECONNECTING, attempt=attempt, max_attempts=max_attempts)

    @classmethod
    def failed(cls, reason: str, reconnect: Callable[[], Awaitable[None]]) -> "ConnectionStatus":
        return cls(ConnectionState.FAILED, reason=reason, reconnect=reconnect)

    @classmethod
    def disposed(cls) -> "ConnectionStatus":
        return cls(ConnectionState.DISPOSED)

    @property
    def is_manual(self) -> bool:
        """Переподключение запущено пользователем (без счетчика попыток)"""
        return self.state is ConnectionState.RECONNECTING and self.attempt is None

    def describe(self) -> str:
        """Текст уведомления для пользователя"""
        if self.state is ConnectionState.CONNECTING:
            return "Подключение к RCON..."
        if self.state is ConnectionState.CONNECTED:
            return "Подключение к RCON установлено"
        if self.state is ConnectionState.RECONNECTING:
            if self.is_manual:
                return "Переподключение к RCON..."
            return f"RCON отключен, попытка переподключения {self.attempt}/{self.max_attempts}"
        if self.state is ConnectionState.FAILED:
            return self.reason or "Не удалось подключиться к RCON"
        return "RCON подключение закрыто"
