"""Inbound event dispatch.

Translates named transport events into session state changes and observer
notifications:

    connect     -> CONNECTED, observer.on_connect()
    ready       -> client.send_employee()
    disconnect  -> DISCONNECTED, observer.on_disconnect(reason),
                   reconnect if the register closed the session
    customer    -> replace current customer, observer.on_customer(raw)
    order       -> replace discount lines, observer.on_order(raw)

Nothing raised while handling an event escapes to the transport. Parse
failures leave state untouched but the raw message is still forwarded so
the host can fall back to its own parsing.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .events import RegisterEvent, is_server_disconnect
from .models import CustomerPayload, OrderPayload
from .observer import maybe_await

if TYPE_CHECKING:
    from .client import DealyzeClient
    from .transport import RegisterTransport

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Connection state machine."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class EventDispatcher:
    """Routes register events for one DealyzeClient.

    Events are delivered one at a time by the transport's event loop, so
    handlers mutate client state without locking. Each handler is short;
    reconnection runs in its own task.
    """

    def __init__(self, client: DealyzeClient) -> None:
        self._client = client
        self.state = ConnectionState.DISCONNECTED
        self._reconnect_task: asyncio.Task[bool] | None = None

    @property
    def reconnect_task(self) -> asyncio.Task[bool] | None:
        """The running (or last finished) reconnect sequence, if any."""
        return self._reconnect_task

    def attach(self, transport: RegisterTransport) -> None:
        """Register all handlers on transport."""
        transport.on(RegisterEvent.CONNECT.value, self.handle_connect)
        transport.on(RegisterEvent.DISCONNECT.value, self.handle_disconnect)
        transport.on(RegisterEvent.READY.value, self.handle_ready)
        transport.on(RegisterEvent.CUSTOMER.value, self.handle_customer)
        transport.on(RegisterEvent.ORDER.value, self.handle_order)

    # =========================================================================
    # Handlers
    # =========================================================================

    async def handle_connect(self) -> None:
        self.state = ConnectionState.CONNECTED
        logger.info("Register connected")
        await self._notify("on_connect")

    async def handle_disconnect(self, reason: str | None = None) -> None:
        """Handle socket disconnection.

        A register-initiated disconnect means the register app closed; it
        is reconnected so the session resumes once the register is back.
        Any other reason leaves the client disconnected.
        """
        self.state = ConnectionState.DISCONNECTED
        logger.info(f"Register disconnected: {reason}")
        await self._notify("on_disconnect", reason)

        if not is_server_disconnect(reason):
            return
        if not self._client.config.auto_reconnect:
            logger.warning("Register closed the session; auto reconnect is disabled")
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return

        self.state = ConnectionState.RECONNECTING
        self._reconnect_task = asyncio.create_task(self._reconnect())

    async def handle_ready(self, *_: Any) -> None:
        """Register is ready for communication; sign the employee in."""
        await self._client.send_employee()

    async def handle_customer(self, message: str | None = None) -> None:
        try:
            payload = CustomerPayload.parse(message) if message is not None else None
        except ValidationError as e:
            logger.warning(f"Could not parse customer payload: {e}")
            payload = None

        if payload is None or payload.customer is None:
            logger.warning("Dealyze Register returned a null customer")
        else:
            self._client.update_customer(payload.customer)

        await self._notify("on_customer", message)

    async def handle_order(self, message: str | None = None) -> None:
        try:
            payload = OrderPayload.parse(message) if message is not None else None
        except ValidationError as e:
            logger.warning(f"Could not parse order payload: {e}")
            payload = None

        if payload is None or payload.order is None or payload.order.discounts is None:
            logger.warning("Dealyze Register returned no discounts")
        else:
            self._client.replace_discount_lines(payload.order.discounts)

        await self._notify("on_order", message)

    # =========================================================================
    # Reconnection
    # =========================================================================

    async def _reconnect(self) -> bool:
        """Reconnect with exponential backoff.

        Returns:
            True once a connect attempt succeeds, False when attempts run out
        """
        config = self._client.config
        delay = config.reconnect_delay
        attempt = 0

        while config.max_reconnect_attempts is None or attempt < config.max_reconnect_attempts:
            attempt += 1
            if delay > 0:
                await asyncio.sleep(delay)

            logger.info(f"Reconnecting to register (attempt {attempt})")
            if await self._client.connect():
                return True

            delay = min(delay * config.reconnect_backoff, config.max_reconnect_delay)

        self.state = ConnectionState.DISCONNECTED
        logger.error(f"Giving up on register after {attempt} reconnect attempts")
        return False

    async def cancel_reconnect(self) -> None:
        """Stop an in-flight reconnect sequence; the client ends up DISCONNECTED."""
        task = self._reconnect_task
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self.state = ConnectionState.DISCONNECTED

    # =========================================================================
    # Observer
    # =========================================================================

    async def _notify(self, hook: str, *args: Any) -> None:
        observer = self._client.observer
        if observer is None:
            return
        try:
            await maybe_await(getattr(observer, hook, None), *args)
        except Exception:
            logger.exception(f"Observer {hook} failed")
