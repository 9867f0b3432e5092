"""Channel names used on the register socket."""

from __future__ import annotations

from enum import Enum


class RegisterEvent(str, Enum):
    """Socket.IO event names exchanged with the Dealyze register."""

    # Transport lifecycle (standard Socket.IO events)
    CONNECT = "connect"
    DISCONNECT = "disconnect"

    # Inbound
    READY = "ready"  # Register is ready; employee sign-in follows
    CUSTOMER = "customer"
    ORDER = "order"  # Also used outbound for bill pay and redemption

    # Outbound
    EMPLOYEE = "employee"


# Disconnect reasons meaning the register closed the session itself.
# Socket.IO servers report "io server disconnect"; python-socketio
# normalizes the same condition to "server disconnect".
SERVER_DISCONNECT_REASONS = frozenset({"io server disconnect", "server disconnect"})

CLIENT_DISCONNECT_REASON = "io client disconnect"


def is_server_disconnect(reason: str | None) -> bool:
    """Check whether a disconnect was initiated by the register."""
    return reason in SERVER_DISCONNECT_REASONS
