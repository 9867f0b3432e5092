"""Dealyze register session client.

Owns one logical connection to the register plus the session state that
goes with it: the signed-in employee (from config), the current customer
(from the register), and the order and discount lines pending in the next
redemption.

Sends never raise. Each returns a SendResult; failures are also logged.

Usage:
    config = ClientConfig(employee_id="123456", employee_username="cashier")
    async with DealyzeClient(config) as client:
        client.register(MyObserver())
        await client.connect()
        ...
        client.add_order_line("0001 ", "Coffee", Decimal("3.50"))
        result = await client.redeem_reward(Decimal("3.50"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from .config import ClientConfig
from .dispatcher import ConnectionState, EventDispatcher
from .events import RegisterEvent
from .log import payload_logger
from .models import (
    BillPayPayload,
    Customer,
    Discount,
    Employee,
    EmployeePayload,
    Order,
    OrderItem,
    RedeemPayload,
    WireModel,
    to_decimal,
)
from .observer import RegisterObserver
from .transport import RegisterTransport, create_socketio_transport

logger = logging.getLogger(__name__)

# Placeholder bill-pay line; hosts send their real bill SKU and price
BILL_PAY_NAME = "Bill Pay"
BILL_PAY_SKU = "abc123"
BILL_PAY_PRICE = Decimal("12.5")


class SendStatus(str, Enum):
    """Outcome of an outgoing send."""

    SENT = "sent"
    SKIPPED = "skipped"  # Precondition not met, nothing emitted
    FAILED = "failed"  # Serialization or emission raised


@dataclass(frozen=True)
class SendResult:
    """Result of sending a message to the register."""

    status: SendStatus
    channel: str
    payload: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == SendStatus.SENT

    @classmethod
    def sent(cls, channel: str, payload: dict[str, Any]) -> SendResult:
        return cls(status=SendStatus.SENT, channel=channel, payload=payload)

    @classmethod
    def skipped(cls, channel: str, reason: str) -> SendResult:
        return cls(status=SendStatus.SKIPPED, channel=channel, error=reason)

    @classmethod
    def failed(cls, channel: str, error: str) -> SendResult:
        return cls(status=SendStatus.FAILED, channel=channel, error=error)


class DealyzeClient:
    """Client for the Dealyze register.

    Session state is mutated only from dispatcher callbacks and the
    host-facing methods below, all on the same event loop.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: RegisterTransport | None = None,
        observer: RegisterObserver | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._transport = transport or create_socketio_transport(self.config)
        self.observer = observer
        self.current_customer: Customer | None = None
        self._order_lines: list[OrderItem] = []
        self._discount_lines: list[Discount] = []
        self._uri = self.config.uri
        self._dispatcher = EventDispatcher(self)
        self._attached = False

    # =========================================================================
    # State
    # =========================================================================

    @property
    def transport(self) -> RegisterTransport:
        return self._transport

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def state(self) -> ConnectionState:
        return self._dispatcher.state

    @property
    def is_connected(self) -> bool:
        return self._transport.is_connected

    @property
    def uri(self) -> str:
        """URI of the most recent connect (config URI until then)."""
        return self._uri

    @property
    def current_employee(self) -> Employee:
        """Employee snapshot built from config."""
        return Employee(id=self.config.employee_id, username=self.config.employee_username)

    @property
    def order_lines(self) -> list[OrderItem]:
        return list(self._order_lines)

    @property
    def discount_lines(self) -> list[Discount]:
        return list(self._discount_lines)

    def register(self, observer: RegisterObserver | None) -> None:
        """Set the observer notified of register events."""
        self.observer = observer

    def update_customer(self, customer: Customer) -> None:
        self.current_customer = customer

    def replace_discount_lines(self, discounts: list[Discount]) -> None:
        self._discount_lines = list(discounts)

    # =========================================================================
    # Connection
    # =========================================================================

    async def connect(self, uri: str | None = None) -> bool:
        """Connect to the register.

        Event handlers are registered on first use. Calling this while
        already connected is not deduplicated; the transport decides.

        Args:
            uri: Register URI (defaults to the last used, then config)

        Returns:
            True if the transport connected, False if it failed (logged)
        """
        if uri is not None:
            self._uri = uri

        if not self._attached:
            self._dispatcher.attach(self._transport)
            self._attached = True

        try:
            await self._transport.connect(self._uri)
        except ConnectionError as e:
            logger.error(f"Could not connect to register: {e}")
            return False
        except Exception:
            logger.exception("Unexpected error connecting to register")
            return False
        return True

    async def disconnect(self) -> None:
        """Close the connection and stop any pending reconnect."""
        await self._dispatcher.cancel_reconnect()
        try:
            await self._transport.disconnect()
        except Exception:
            logger.exception("Error while disconnecting from register")

    async def __aenter__(self) -> DealyzeClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    # =========================================================================
    # Order and discount lines
    # =========================================================================

    def clear_order_lines(self) -> None:
        self._order_lines.clear()

    def clear_discount_lines(self) -> None:
        self._discount_lines.clear()

    def add_order_line(self, sku: str, name: str, price: Decimal | float | int | str) -> None:
        """Append an order line for the next redemption.

        Raises:
            ValueError: If price is not a finite number; no line is added
        """
        self._order_lines.append(
            OrderItem(name=name.rstrip(), skus=[sku.rstrip()], price=to_decimal(price))
        )

    def add_discount_line(
        self,
        sku: str,
        name: str,
        amount: Decimal | float | int | str,
        percent: Decimal | float | int | str,
    ) -> None:
        """Add a discount line.

        `amount` is accepted for parity with register integrations but is
        not part of the wire format; only the percent is sent.

        Raises:
            ValueError: If percent is not a finite number; no line is added
        """
        self._discount_lines.append(
            Discount(name=name.rstrip(), skus=[sku.rstrip()], percent=to_decimal(percent))
        )

    # =========================================================================
    # Sends
    # =========================================================================

    async def send_employee(self) -> SendResult:
        """Sign the configured employee in on the register."""
        channel = RegisterEvent.EMPLOYEE.value
        employee = self.current_employee
        if not employee.id:
            logger.warning("Cannot send employee, employee id is not set")
            return SendResult.skipped(channel, "employee id is not set")

        logger.info("Sending employee and waiting for messages")
        return await self._emit(channel, EmployeePayload(employee=employee))

    async def pay_bill(self) -> SendResult:
        """Send a bill pay for the current customer.

        The line item is a fixed placeholder; integrations send the real
        bill SKU and price.
        """
        channel = RegisterEvent.ORDER.value
        skipped = self._check_ready_to_order("pay bill")
        if skipped is not None:
            return skipped

        item = OrderItem(name=BILL_PAY_NAME, skus=[BILL_PAY_SKU], price=BILL_PAY_PRICE)
        payload = BillPayPayload(employee=self.current_employee, order=Order(items=[item]))
        return await self._emit(channel, payload)

    async def redeem_reward(self, total: Decimal | float | int | str) -> SendResult:
        """Send the accumulated order and discount lines as a redemption."""
        channel = RegisterEvent.ORDER.value
        skipped = self._check_ready_to_order("redeem reward")
        if skipped is not None:
            return skipped

        try:
            order = Order(
                items=list(self._order_lines),
                discounts=list(self._discount_lines),
                total=to_decimal(total),
            )
            payload = RedeemPayload(
                employee=self.current_employee,
                order=order,
                customer=self.current_customer,
            )
        except Exception as e:
            logger.exception("Could not build redemption payload")
            return SendResult.failed(channel, str(e))

        return await self._emit(channel, payload)

    def _check_ready_to_order(self, action: str) -> SendResult | None:
        channel = RegisterEvent.ORDER.value
        if self.current_customer is None:
            logger.warning(f"Cannot {action}, current customer is not set")
            return SendResult.skipped(channel, "current customer is not set")
        if not self.config.employee_id:
            logger.warning(f"Cannot {action}, employee id is not set")
            return SendResult.skipped(channel, "employee id is not set")
        return None

    async def _emit(self, channel: str, payload: WireModel) -> SendResult:
        try:
            data = payload.to_wire()
            payload_logger().info(payload.to_json())
            await self._transport.emit(channel, data)
        except Exception as e:
            logger.exception(f"Failed to send {channel} to register")
            return SendResult.failed(channel, str(e))
        return SendResult.sent(channel, data)
