"""
Backend entities and input payloads.

The backend names every primary key `id_key`. Enumerations travel as
small integers with a fixed mapping.
"""

from __future__ import annotations

from datetime import date as Date
from decimal import Decimal
from enum import IntEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# ═══════════════════════════════════════════════════════════════════════════════
# Wire Enums
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentType(IntEnum):
    CASH = 1
    CARD = 2
    DEBIT = 3
    CREDIT = 4
    BANK_TRANSFER = 5

    @property
    def is_card(self) -> bool:
        return self in (PaymentType.CARD, PaymentType.DEBIT, PaymentType.CREDIT)


class DeliveryMethod(IntEnum):
    DRIVE_THRU = 1
    ON_HAND = 2
    HOME_DELIVERY = 3


class OrderStatus(IntEnum):
    PENDING = 1
    IN_PROGRESS = 2
    DELIVERED = 3
    CANCELED = 4


# Decimal in Python, JSON number on the wire
WireMoney = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]

# ═══════════════════════════════════════════════════════════════════════════════
# Entities — what the backend returns
# ═══════════════════════════════════════════════════════════════════════════════


class Entity(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id_key: int


class Category(Entity):
    name: str


class Product(Entity):
    name: str
    price: WireMoney
    stock: int
    category_id: int | None = None


class Address(Entity):
    street: str
    number: str | None = None
    city: str
    client_id: int


class Client(Entity):
    name: str
    lastname: str
    email: str
    telephone: str | None = None
    addresses: list[Address] = Field(default_factory=list)


class Bill(Entity):
    bill_number: str
    date: Date
    total: WireMoney
    payment_type: PaymentType
    client_id: int
    discount: WireMoney | None = None


class Order(Entity):
    date: Date
    total: WireMoney
    delivery_method: DeliveryMethod
    status: OrderStatus
    client_id: int
    bill_id: int


class OrderDetail(Entity):
    quantity: int
    price: WireMoney | None = None
    order_id: int
    product_id: int


class Review(Entity):
    rating: int
    comment: str
    product_id: int


# ═══════════════════════════════════════════════════════════════════════════════
# Inputs — what we send
# ═══════════════════════════════════════════════════════════════════════════════


class Input(BaseModel):
    """
    Base payload.

    Note: id_key is never part of an input, the server assigns it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)


class CategoryInput(Input):
    name: str


class ProductInput(Input):
    name: str
    price: WireMoney
    stock: int = Field(ge=0)
    category_id: int


class ClientInput(Input):
    name: str
    lastname: str
    email: str
    telephone: str


class AddressInput(Input):
    street: str
    city: str
    client_id: int
    number: str | None = None


class BillInput(Input):
    bill_number: str
    date: Date
    total: WireMoney
    payment_type: PaymentType
    client_id: int
    discount: WireMoney | None = None


class OrderInput(Input):
    date: Date
    total: WireMoney
    delivery_method: DeliveryMethod
    status: OrderStatus
    client_id: int
    bill_id: int


class OrderDetailInput(Input):
    order_id: int
    product_id: int
    quantity: int = Field(ge=1)
    price: WireMoney | None = None


class ReviewInput(Input):
    rating: int
    comment: str
    product_id: int


__all__ = (
    "PaymentType",
    "DeliveryMethod",
    "OrderStatus",
    "Entity",
    "Category",
    "Product",
    "Address",
    "Client",
    "Bill",
    "Order",
    "OrderDetail",
    "Review",
    "Input",
    "CategoryInput",
    "ProductInput",
    "ClientInput",
    "AddressInput",
    "BillInput",
    "OrderInput",
    "OrderDetailInput",
    "ReviewInput",
)
