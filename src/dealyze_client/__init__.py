"""Dealyze register client.

Connects to the Dealyze register over Socket.IO, signs an employee in,
relays customer and order events to the host application, and sends
bill-pay and reward-redemption requests back.
"""

from .client import DealyzeClient, SendResult, SendStatus
from .config import ClientConfig
from .dispatcher import ConnectionState, EventDispatcher
from .events import SERVER_DISCONNECT_REASONS, RegisterEvent
from .log import configure_logging
from .models import (
    BillPayPayload,
    Customer,
    CustomerPayload,
    Discount,
    Employee,
    EmployeePayload,
    Order,
    OrderItem,
    OrderPayload,
    RedeemPayload,
    RegisterJSON,
)
from .observer import CallbackObserver, RegisterObserver
from .transport import (
    MockRegisterTransport,
    RegisterTransport,
    SocketIOTransport,
    create_mock_transport,
    create_socketio_transport,
)

__all__ = [
    # Client
    "DealyzeClient",
    "SendResult",
    "SendStatus",
    "ClientConfig",
    "configure_logging",
    # Dispatch
    "EventDispatcher",
    "ConnectionState",
    "RegisterEvent",
    "SERVER_DISCONNECT_REASONS",
    # Observer
    "RegisterObserver",
    "CallbackObserver",
    # Transport
    "RegisterTransport",
    "SocketIOTransport",
    "MockRegisterTransport",
    "create_socketio_transport",
    "create_mock_transport",
    # Models
    "Employee",
    "Customer",
    "OrderItem",
    "Discount",
    "Order",
    "EmployeePayload",
    "CustomerPayload",
    "OrderPayload",
    "BillPayPayload",
    "RedeemPayload",
    "RegisterJSON",
]
