"""Tests for register transports.

Covers:
- SocketIOTransport wiring onto python-socketio's AsyncClient
- MockRegisterTransport recording and event injection
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from socketio import exceptions as sio_exceptions

from dealyze_client.config import ClientConfig
from dealyze_client.models import RegisterJSON
from dealyze_client.transport import (
    MockRegisterTransport,
    RegisterTransport,
    SocketIOTransport,
    create_mock_transport,
    create_socketio_transport,
)


def make_sio() -> MagicMock:
    sio = MagicMock()
    sio.connected = False
    sio.connect = AsyncMock()
    sio.disconnect = AsyncMock()
    sio.emit = AsyncMock()
    return sio


def registered_handler(sio: MagicMock, event: str):
    for call in sio.on.call_args_list:
        if call.args[0] == event:
            return call.args[1]
    raise AssertionError(f"No handler registered for {event}")


# =============================================================================
# SocketIOTransport Tests
# =============================================================================


class TestSocketIOTransport:
    """Tests for the python-socketio backed transport."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(SocketIOTransport(client=make_sio()), RegisterTransport)

    def test_default_client_disables_library_reconnection(self) -> None:
        with patch("dealyze_client.transport.socketio.AsyncClient") as mock_cls:
            SocketIOTransport()

        mock_cls.assert_called_once_with(reconnection=False, json=RegisterJSON)

    def test_is_connected_reflects_client(self) -> None:
        sio = make_sio()
        transport = SocketIOTransport(client=sio)

        assert transport.is_connected is False
        sio.connected = True
        assert transport.is_connected is True

    @pytest.mark.asyncio
    async def test_connect_passes_config(self) -> None:
        sio = make_sio()
        config = ClientConfig(connect_timeout=2.5, transports=["websocket"])
        transport = SocketIOTransport(config, client=sio)

        await transport.connect("ws://register.test:3100")

        sio.connect.assert_awaited_once_with(
            "ws://register.test:3100", transports=["websocket"], wait_timeout=2.5
        )

    @pytest.mark.asyncio
    async def test_connect_error_becomes_builtin(self) -> None:
        sio = make_sio()
        sio.connect.side_effect = sio_exceptions.ConnectionError("refused")
        transport = SocketIOTransport(client=sio)

        with pytest.raises(ConnectionError, match="refused"):
            await transport.connect("ws://register.test:3100")

    @pytest.mark.asyncio
    async def test_unexpected_connect_error_becomes_builtin(self) -> None:
        sio = make_sio()
        sio.connect.side_effect = ValueError("Client is not in a disconnected state")
        transport = SocketIOTransport(client=sio)

        with pytest.raises(ConnectionError, match="not in a disconnected state") as exc_info:
            await transport.connect("ws://register.test:3100")

        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_emit_forwards_payload(self) -> None:
        sio = make_sio()
        transport = SocketIOTransport(client=sio)

        await transport.emit("employee", {"employee": {"id": "1", "username": "u"}})

        sio.emit.assert_awaited_once_with("employee", {"employee": {"id": "1", "username": "u"}})

    @pytest.mark.asyncio
    async def test_disconnect(self) -> None:
        sio = make_sio()
        await SocketIOTransport(client=sio).disconnect()

        sio.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_message_handler_receives_json_text(self) -> None:
        sio = make_sio()
        transport = SocketIOTransport(client=sio)
        handler = AsyncMock()

        transport.on("customer", handler)
        await registered_handler(sio, "customer")({"customer": {"name": "Ana"}})

        (message,) = handler.await_args.args
        assert json.loads(message) == {"customer": {"name": "Ana"}}

    @pytest.mark.asyncio
    async def test_connect_handler_gets_no_args(self) -> None:
        sio = make_sio()
        transport = SocketIOTransport(client=sio)
        handler = AsyncMock()

        transport.on("connect", handler)
        await registered_handler(sio, "connect")()

        handler.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_disconnect_handler_with_and_without_reason(self) -> None:
        sio = make_sio()
        transport = SocketIOTransport(client=sio)
        handler = AsyncMock()

        transport.on("disconnect", handler)
        relay = registered_handler(sio, "disconnect")
        await relay("server disconnect")
        await relay()

        assert [c.args for c in handler.await_args_list] == [("server disconnect",), (None,)]

    def test_factory(self) -> None:
        with patch("dealyze_client.transport.socketio.AsyncClient"):
            transport = create_socketio_transport(ClientConfig(uri="ws://x:1"))

        assert isinstance(transport, SocketIOTransport)
        assert transport.config.uri == "ws://x:1"


# =============================================================================
# MockRegisterTransport Tests
# =============================================================================


class TestMockRegisterTransport:
    """Tests for the in-memory transport."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(create_mock_transport(), RegisterTransport)

    @pytest.mark.asyncio
    async def test_connect_records_and_fires(self) -> None:
        transport = MockRegisterTransport()
        on_connect = AsyncMock()
        transport.on("connect", on_connect)

        await transport.connect("ws://a")

        assert transport.connect_calls == ["ws://a"]
        assert transport.is_connected is True
        on_connect.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_connect_without_firing(self) -> None:
        transport = MockRegisterTransport(fire_connect=False)
        on_connect = AsyncMock()
        transport.on("connect", on_connect)

        await transport.connect("ws://a")

        on_connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fail_connects_counts_down(self) -> None:
        transport = MockRegisterTransport()
        transport.fail_connects = 1

        with pytest.raises(ConnectionError):
            await transport.connect("ws://a")
        await transport.connect("ws://a")

        assert transport.connect_calls == ["ws://a", "ws://a"]
        assert transport.is_connected is True

    @pytest.mark.asyncio
    async def test_emit_records(self) -> None:
        transport = MockRegisterTransport()
        await transport.emit("employee", {"employee": {}})
        await transport.emit("order", {"order": {}})

        assert transport.emitted == [("employee", {"employee": {}}), ("order", {"order": {}})]
        assert transport.emitted_on("order") == [{"order": {}}]

    @pytest.mark.asyncio
    async def test_emit_error(self) -> None:
        transport = MockRegisterTransport()
        transport.emit_error = RuntimeError("socket closed")

        with pytest.raises(RuntimeError):
            await transport.emit("order", {})
        assert transport.emitted == []

    @pytest.mark.asyncio
    async def test_disconnect_fires_client_reason(self) -> None:
        transport = MockRegisterTransport()
        on_disconnect = AsyncMock()
        transport.on("disconnect", on_disconnect)
        await transport.connect("ws://a")

        await transport.disconnect()
        await transport.disconnect()

        on_disconnect.assert_awaited_once_with("io client disconnect")
        assert transport.is_connected is False

    @pytest.mark.asyncio
    async def test_fire_encodes_dicts(self) -> None:
        transport = MockRegisterTransport()
        handler = AsyncMock()
        transport.on("order", handler)

        await transport.fire("order", {"order": {"items": []}})

        handler.assert_awaited_once_with('{"order": {"items": []}}')

    @pytest.mark.asyncio
    async def test_fire_unhandled_event_is_ignored(self) -> None:
        await MockRegisterTransport().fire("ready")

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        transport = MockRegisterTransport()
        await transport.connect("ws://a")
        await transport.emit("order", {})

        transport.clear()

        assert transport.connect_calls == []
        assert transport.emitted == []
