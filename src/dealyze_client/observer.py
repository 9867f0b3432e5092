"""Host-side observer hooks.

The host application learns about register activity through an observer.
Every hook is optional: subclass RegisterObserver and override what you
need, or pass plain functions to CallbackObserver.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any


async def maybe_await(fn: Callable[..., Any] | None, *args: Any) -> None:
    """Call fn with args, awaiting the result if it is awaitable."""
    if fn is None:
        return
    result = fn(*args)
    if inspect.isawaitable(result):
        await result


class RegisterObserver:
    """Receives connection, customer and order notifications.

    Messages are passed through as the raw JSON text received from the
    register so hosts can apply their own parsing.
    """

    async def on_connect(self) -> None:
        """Socket connected to the register."""

    async def on_disconnect(self, reason: str | None) -> None:
        """Socket disconnected, with the transport's reason."""

    async def on_customer(self, message: str | None) -> None:
        """A customer signed in at the register."""

    async def on_order(self, message: str | None) -> None:
        """A reward or promotion was chosen at the register."""


class CallbackObserver(RegisterObserver):
    """Observer built from individual function handles.

    Handles may be sync or async; unset handles are no-ops.

    Usage:
        observer = CallbackObserver(on_customer=lambda msg: print(msg))
        client.register(observer)
    """

    def __init__(
        self,
        on_connect: Callable[[], Any] | None = None,
        on_disconnect: Callable[[str | None], Any] | None = None,
        on_customer: Callable[[str | None], Any] | None = None,
        on_order: Callable[[str | None], Any] | None = None,
    ) -> None:
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self._on_customer = on_customer
        self._on_order = on_order

    async def on_connect(self) -> None:
        await maybe_await(self._on_connect)

    async def on_disconnect(self, reason: str | None) -> None:
        await maybe_await(self._on_disconnect, reason)

    async def on_customer(self, message: str | None) -> None:
        await maybe_await(self._on_customer, message)

    async def on_order(self, message: str | None) -> None:
        await maybe_await(self._on_order, message)
