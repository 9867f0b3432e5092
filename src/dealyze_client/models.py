"""Wire models for the Dealyze register protocol.

Plain value records (Employee, Customer, OrderItem, Discount, Order) and the
payload envelopes that frame them on each Socket.IO channel.

Wire format:
- Field names are camelCase on the wire (phoneNumber, emailAddress)
- Unset optional fields are omitted rather than sent as null
- Money fields are Decimal in memory and exact JSON numbers on the wire;
  RegisterJSON encodes and decodes them without passing through float
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Self

import simplejson
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert a money value to Decimal without binary float artifacts.

    Floats go through their shortest repr, so 9.99 becomes Decimal("9.99")
    instead of Decimal(9.99000000000000021316...).

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Invalid money value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid money value: {value!r}")
    return result


def _coerce_money(value: Any) -> Any:
    if isinstance(value, float):
        return to_decimal(value)
    return value


Money = Annotated[Decimal, BeforeValidator(_coerce_money)]


class RegisterJSON:
    """JSON codec for register messages.

    Decimals are written as plain JSON numbers and JSON numbers with a
    fraction are read back as Decimal. Shaped like the json module so it
    can be handed to python-socketio.
    """

    @staticmethod
    def dumps(obj: Any, **kwargs: Any) -> str:
        kwargs.setdefault("use_decimal", True)
        return simplejson.dumps(obj, **kwargs)

    @staticmethod
    def loads(s: str | bytes, **kwargs: Any) -> Any:
        kwargs.setdefault("use_decimal", True)
        return simplejson.loads(s, **kwargs)


class WireModel(BaseModel):
    """Base for everything that crosses the socket."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dict as emitted on the channel; money stays Decimal for RegisterJSON."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return RegisterJSON.dumps(self.to_wire(), separators=(",", ":"))

    @classmethod
    def parse(cls, message: str | bytes | dict[str, Any]) -> Self:
        """Parse an inbound message.

        Raises:
            pydantic.ValidationError: If the message is not valid JSON or
                does not match the model
        """
        if isinstance(message, dict):
            return cls.model_validate(message)
        try:
            data = RegisterJSON.loads(message)
        except simplejson.JSONDecodeError as e:
            raise ValidationError.from_exception_data(
                cls.__name__,
                [{"type": "json_invalid", "loc": (), "input": message, "ctx": {"error": e.msg}}],
            ) from e
        return cls.model_validate(data)


# =============================================================================
# Value records
# =============================================================================


class Employee(WireModel):
    """Employee signed in on the register."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str


class Customer(WireModel):
    """Customer who signed in at the register."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    phone_number: str | None = None
    email_address: str | None = None


class OrderItem(WireModel):
    name: str
    skus: list[str] = Field(default_factory=list)
    price: Money


class Discount(WireModel):
    name: str
    skus: list[str] = Field(default_factory=list)
    percent: Money


class Order(WireModel):
    """An order as exchanged with the register.

    `total` is whatever the caller supplies; it is never derived from
    items or discounts.
    """

    items: list[OrderItem] = Field(default_factory=list)
    discounts: list[Discount] | None = None
    total: Money | None = None


# =============================================================================
# Payload envelopes
# =============================================================================


class EmployeePayload(WireModel):
    employee: Employee


class CustomerPayload(WireModel):
    customer: Customer | None = None


class OrderPayload(WireModel):
    order: Order | None = None


class BillPayPayload(WireModel):
    employee: Employee
    order: Order


class RedeemPayload(WireModel):
    employee: Employee
    order: Order
    customer: Customer


def dump_message(message: Any) -> str | None:
    """Render an inbound message as text for observers.

    Socket.IO decodes JSON payloads before handing them over; observers
    always receive the raw JSON string.
    """
    if message is None or isinstance(message, str):
        return message
    if isinstance(message, bytes):
        return message.decode("utf-8", errors="replace")
    return RegisterJSON.dumps(message)
