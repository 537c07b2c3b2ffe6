import asyncio

import pytest
from rcon.exceptions import EmptyResponse

from rcon_bridge.rcon.connection import ConnectionConfig, SourceRCONConnection, TransportError


class FakeClient:
    """Замена rcon.source.Client: ответы на команды задаются словарем"""

    def __init__(self, host, port, *, timeout=None, passwd=None, connect_error=None, responses=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.passwd = passwd
        self.connect_error = connect_error
        self.responses = responses if responses is not None else {}
        self.login = None
        self.closed = False
        self.commands = []

    def connect(self, login=False):
        self.login = login
        if self.connect_error is not None:
            raise self.connect_error
        return self

    def run(self, command, *args):
        self.commands.append(command)
        response = self.responses.get(command, "")
        if isinstance(response, BaseException):
            raise response
        return response

    def close(self):
        self.closed = True


class ClientFactory:
    def __init__(self, **client_kwargs):
        self.client_kwargs = client_kwargs
        self.clients = []

    def __call__(self, host, port, **kwargs):
        client = FakeClient(host, port, **kwargs, **self.client_kwargs)
        self.clients.append(client)
        return client


def make_connection(factory, **config_kwargs):
    config_kwargs.setdefault("keepalive_interval", 0)
    config = ConnectionConfig(host="10.0.0.5", port=25575, password="secret", **config_kwargs)
    connection = SourceRCONConnection(config, client_factory=factory)
    lost = []
    connection.on_disconnect(lambda: lost.append(True))
    return connection, lost


def test_connect_opens_logged_in_client():
    factory = ClientFactory()
    connection, lost = make_connection(factory, timeout=5.0)

    asyncio.run(connection.connect())

    assert connection.connected
    client = factory.clients[0]
    assert (client.host, client.port, client.passwd, client.timeout) == ("10.0.0.5", 25575, "secret", 5.0)
    assert client.login is True
    assert lost == []


def test_connect_failure_raises_transport_error():
    factory = ClientFactory(connect_error=ConnectionRefusedError(111, "Connection refused"))
    connection, lost = make_connection(factory)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(connection.connect())

    assert exc_info.value.name == "ConnectionRefusedError"
    assert str(exc_info.value).startswith("ConnectionRefusedError: ")
    assert not connection.connected
    assert factory.clients[0].closed
    assert lost == []


def test_send_returns_command_output():
    factory = ClientFactory(responses={"list": "There are 2 of a max of 20 players online"})
    connection, _ = make_connection(factory)

    async def scenario():
        await connection.connect()
        return await connection.send("list")

    assert asyncio.run(scenario()) == "There are 2 of a max of 20 players online"
    assert factory.clients[0].commands == ["list"]


def test_send_without_connection():
    connection, lost = make_connection(ClientFactory())

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(connection.send("list"))

    assert exc_info.value.name == "NotConnected"
    assert lost == []


def test_dead_socket_fires_disconnect_once():
    factory = ClientFactory(responses={"list": EmptyResponse()})
    connection, lost = make_connection(factory)

    async def scenario():
        await connection.connect()
        with pytest.raises(TransportError) as first:
            await connection.send("list")
        with pytest.raises(TransportError) as second:
            await connection.send("list")
        return first.value, second.value

    first, second = asyncio.run(scenario())

    assert first.name == "EmptyResponse"
    assert second.name == "NotConnected"
    assert lost == [True]
    assert not connection.connected
    assert factory.clients[0].closed


def test_timeout_keeps_connection():
    factory = ClientFactory(responses={"save-all": TimeoutError("timed out")})
    connection, lost = make_connection(factory)

    async def scenario():
        await connection.connect()
        with pytest.raises(TransportError):
            await connection.send("save-all")

    asyncio.run(scenario())

    assert connection.connected
    assert lost == []


def test_close_and_reconnect_do_not_fire_disconnect():
    factory = ClientFactory()
    connection, lost = make_connection(factory)

    async def scenario():
        await connection.connect()
        await connection.connect()
        await connection.close()
        await connection.close()

    asyncio.run(scenario())

    assert len(factory.clients) == 2
    assert all(client.closed for client in factory.clients)
    assert not connection.connected
    assert lost == []


def test_keepalive_detects_dropped_connection():
    factory = ClientFactory(responses={"list": ConnectionResetError(104, "Connection reset by peer")})
    config = ConnectionConfig(keepalive_interval=0.01)
    connection = SourceRCONConnection(config, client_factory=factory)

    async def scenario():
        dropped = asyncio.Event()
        connection.on_disconnect(dropped.set)
        await connection.connect()
        await asyncio.wait_for(dropped.wait(), timeout=2)

    asyncio.run(scenario())

    assert not connection.connected
    assert factory.clients[0].commands == ["list"]


def test_negative_retry_settings_rejected():
    with pytest.raises(ValueError):
        ConnectionConfig(max_retry=-1)
    with pytest.raises(ValueError):
        ConnectionConfig(retry_interval=-5)
