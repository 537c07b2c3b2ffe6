"""
Модуль для работы с RCON
"""
from .connection import ConnectionConfig, SourceRCONConnection, TransportError
from .status import ConnectionState, ConnectionStatus
from .supervisor import NO_OUTPUT, CommandError, ConnectionSupervisor

__all__ = [
    'ConnectionConfig',
    'SourceRCONConnection',
    'TransportError',
    'ConnectionState',
    'ConnectionStatus',
    'NO_OUTPUT',
    'CommandError',
    'ConnectionSupervisor'
]
