"""
Repo — uniform CRUD client for the shop backend.

    from storefront import repo as R

    async with R.ShopApi.connect(settings) as api:
        match await api.products.get_one(7):
            case Ok(product): ...
            case Error(e): print(e.message)
"""

from __future__ import annotations

from storefront.repo._entities import (
    PaymentType,
    DeliveryMethod,
    OrderStatus,
    Entity,
    Category,
    Product,
    Address,
    Client,
    Bill,
    Order,
    OrderDetail,
    Review,
    Input,
    CategoryInput,
    ProductInput,
    ClientInput,
    AddressInput,
    BillInput,
    OrderInput,
    OrderDetailInput,
    ReviewInput,
)
from storefront.repo._types import RepoError, RepoErrorKind, backend_message
from storefront.repo._client import Repository, ShopApi

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
    "RepoError",
    "RepoErrorKind",
    "backend_message",
    "Repository",
    "ShopApi",
)
