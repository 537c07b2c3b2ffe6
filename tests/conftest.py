import asyncio

import pytest

from rcon_bridge.rcon.connection import ConnectionConfig, TransportError
from rcon_bridge.rcon.supervisor import ConnectionSupervisor


class FakeConnection:
    """RemoteConnection в памяти: результаты connect и ответы send задаются списками"""

    def __init__(self, connect_results=None, replies=None):
        self.connected = False
        self.connect_results = list(connect_results or [])
        self.replies = list(replies or [])
        self.connect_calls = 0
        self.close_calls = 0
        self.close_error = None
        self.sent = []
        self.handlers = []

    def on_disconnect(self, handler):
        self.handlers.append(handler)

    async def connect(self):
        self.connect_calls += 1
        result = self.connect_results.pop(0) if self.connect_results else None
        if result is not None:
            self.connected = False
            raise result
        self.connected = True

    async def send(self, text):
        self.sent.append(text)
        if not self.connected:
            raise TransportError("NotConnected", "RCON клиент не подключен")
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self):
        self.close_calls += 1
        self.connected = False
        if self.close_error is not None:
            raise self.close_error

    def drop(self):
        self.connected = False
        for handler in self.handlers:
            handler()


class RecordingClock:
    def __init__(self):
        self.now = 0
        self.sleeps = []

    async def sleep(self, millis):
        self.sleeps.append(millis)
        self.now += millis
        await asyncio.sleep(0)


class RecordingSink:
    def __init__(self, clock=None):
        self.clock = clock
        self.statuses = []
        self.times = []

    def update(self, status):
        self.statuses.append(status)
        self.times.append(self.clock.now if self.clock else None)

    @property
    def states(self):
        return [status.state for status in self.statuses]


def refused():
    return TransportError("ConnectionRefusedError", "[Errno 111] Connection refused")


@pytest.fixture
def clock():
    return RecordingClock()


@pytest.fixture
def sink(clock):
    return RecordingSink(clock)


@pytest.fixture
def make_supervisor(clock, sink):
    def factory(connection, **config_kwargs):
        config = ConnectionConfig(**config_kwargs)
        return ConnectionSupervisor(connection, config, sink, clock)
    return factory
