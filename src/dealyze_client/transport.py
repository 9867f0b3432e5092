"""Transport abstraction for the register socket.

The client only needs a narrow slice of a real-time channel:
- connect/disconnect: Lifecycle management
- on: Register a handler for a named inbound event
- emit: Send a named JSON message, fire-and-forget

Implementations:
- SocketIOTransport: python-socketio AsyncClient (production)
- MockRegisterTransport: In-memory, records emissions (testing)

Handlers are always invoked with text arguments: Socket.IO decodes JSON
payloads into dicts, which are re-encoded here so the dispatcher sees the
message exactly as the register sent it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

import socketio

from .config import ClientConfig
from .events import CLIENT_DISCONNECT_REASON, RegisterEvent
from .models import RegisterJSON, dump_message

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Awaitable[None]]


@runtime_checkable
class RegisterTransport(Protocol):
    """Protocol for register transports."""

    @property
    def is_connected(self) -> bool:
        """Check if the socket is connected."""
        ...

    async def connect(self, uri: str) -> None:
        """Open a connection to the register.

        Raises:
            ConnectionError: If the connection cannot be established
        """
        ...

    async def disconnect(self) -> None:
        """Close the connection."""
        ...

    def on(self, event: str, handler: EventHandler) -> None:
        """Register handler for a named event.

        The connect handler gets no arguments, the disconnect handler gets
        the reason, application events get the message text.
        """
        ...

    async def emit(self, event: str, payload: dict[str, Any]) -> None:
        """Send a named message. No delivery acknowledgment."""
        ...


class SocketIOTransport:
    """Transport over a python-socketio AsyncClient.

    The library's own reconnection is disabled; the event dispatcher
    decides when to reconnect. Packets go through RegisterJSON so money
    keeps its exact Decimal value in both directions.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        client: socketio.AsyncClient | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._sio = client or socketio.AsyncClient(reconnection=False, json=RegisterJSON)

    @property
    def is_connected(self) -> bool:
        return bool(self._sio.connected)

    async def connect(self, uri: str) -> None:
        try:
            await self._sio.connect(
                uri,
                transports=self.config.transports,
                wait_timeout=self.config.connect_timeout,
            )
        except Exception as e:
            raise ConnectionError(f"Failed to connect to {uri}: {e}") from e
        logger.info(f"Connected to register at {uri}")

    async def disconnect(self) -> None:
        await self._sio.disconnect()

    def on(self, event: str, handler: EventHandler) -> None:
        if event == RegisterEvent.DISCONNECT.value:
            # Older python-socketio releases call this with no reason
            async def relay_disconnect(reason: Any = None) -> None:
                await handler(dump_message(reason))

            self._sio.on(event, relay_disconnect)
            return

        async def relay(*args: Any) -> None:
            await handler(*[dump_message(arg) for arg in args])

        self._sio.on(event, relay)

    async def emit(self, event: str, payload: dict[str, Any]) -> None:
        await self._sio.emit(event, payload)


class MockRegisterTransport:
    """In-memory transport for tests and offline hosts.

    Records connect URIs and emissions; fire() simulates inbound events.

    Usage:
        transport = MockRegisterTransport()
        client = DealyzeClient(config, transport=transport)
        await client.connect()
        await transport.fire("customer", '{"customer": {"name": "Ana"}}')
        assert transport.emitted == [...]
    """

    def __init__(self, *, fire_connect: bool = True) -> None:
        self._fire_connect = fire_connect
        self._connected = False
        self.handlers: dict[str, EventHandler] = {}
        self.connect_calls: list[str] = []
        self.emitted: list[tuple[str, dict[str, Any]]] = []
        # Number of upcoming connect() calls that should fail
        self.fail_connects = 0
        self.emit_error: Exception | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self, uri: str) -> None:
        self.connect_calls.append(uri)
        if self.fail_connects > 0:
            self.fail_connects -= 1
            raise ConnectionError(f"Mock connection to {uri} refused")
        self._connected = True
        if self._fire_connect:
            await self.fire(RegisterEvent.CONNECT.value)

    async def disconnect(self) -> None:
        if not self._connected:
            return
        await self.fire(RegisterEvent.DISCONNECT.value, CLIENT_DISCONNECT_REASON)

    def on(self, event: str, handler: EventHandler) -> None:
        self.handlers[event] = handler

    async def emit(self, event: str, payload: dict[str, Any]) -> None:
        if self.emit_error is not None:
            raise self.emit_error
        self.emitted.append((event, payload))

    async def fire(self, event: str | RegisterEvent, *args: Any) -> None:
        """Deliver an inbound event to the registered handler."""
        name = event.value if isinstance(event, RegisterEvent) else event
        if name == RegisterEvent.DISCONNECT.value:
            self._connected = False
        handler = self.handlers.get(name)
        if handler is None:
            return
        await handler(*[dump_message(arg) for arg in args])

    def emitted_on(self, event: str | RegisterEvent) -> list[dict[str, Any]]:
        """Payloads emitted on one channel, in order."""
        name = event.value if isinstance(event, RegisterEvent) else event
        return [payload for channel, payload in self.emitted if channel == name]

    def clear(self) -> None:
        """Forget recorded connects and emissions."""
        self.connect_calls.clear()
        self.emitted.clear()


def create_socketio_transport(config: ClientConfig | None = None) -> SocketIOTransport:
    """Create the production Socket.IO transport."""
    return SocketIOTransport(config)


def create_mock_transport(*, fire_connect: bool = True) -> MockRegisterTransport:
    """Create an in-memory transport."""
    return MockRegisterTransport(fire_connect=fire_connect)
