"""
Shared fixtures: an in-memory shop backend behind httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import httpx
import pytest

from storefront.cart import CartStore, MemoryStorage
from storefront.checkout import Checkout
from storefront.repo import Product, ShopApi

RESOURCES = (
    "products",
    "categories",
    "clients",
    "addresses",
    "bills",
    "orders",
    "order_details",
    "reviews",
)

FIXED_NOW = datetime(2024, 5, 1, 12, 30)


@dataclass
class Failure:
    status: int
    body: object
    when: Callable[[dict], bool] | None = None


class FakeBackend:
    """
    Just enough of the shop REST API.

    Collection URLs need the trailing slash, item URLs must not have one.
    Every request is recorded as (METHOD, path).
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[int, dict]] = {name: {} for name in RESOURCES}
        self.requests: list[tuple[str, str]] = []
        self.failures: dict[str, Failure] = {}
        self._next_id = {name: 1 for name in RESOURCES}

    # ── seeding / inspection ────────────────────────────────────────────────

    def insert(self, resource: str, row: dict) -> dict:
        id_key = row.get("id_key") or self._next_id[resource]
        self._next_id[resource] = max(self._next_id[resource], id_key + 1)
        stored = {**row, "id_key": id_key}
        self.tables[resource][id_key] = stored
        return stored

    def seed_product(
        self, id_key: int, name: str, price: str, stock: int, category_id: int | None = 1
    ) -> Product:
        row = self.insert("products", {
            "id_key": id_key,
            "name": name,
            "price": float(price),
            "stock": stock,
            "category_id": category_id,
        })
        return Product.model_validate(row)

    def rows(self, resource: str) -> list[dict]:
        return list(self.tables[resource].values())

    def posts(self) -> list[str]:
        return [path for method, path in self.requests if method == "POST"]

    def fail(
        self,
        resource: str,
        status: int,
        detail: object,
        when: Callable[[dict], bool] | None = None,
    ) -> None:
        """Writes to resource answer with status; when narrows it to some payloads."""
        body = {"detail": detail} if detail is not None else None
        self.failures[resource] = Failure(status, body, when)

    # ── transport ───────────────────────────────────────────────────────────

    async def handle(self, request: httpx.Request) -> httpx.Response:
        # Let other tasks run, as a real network round trip would
        await asyncio.sleep(0)

        path = request.url.path
        self.requests.append((request.method, path))

        parts = path.strip("/").split("/")
        resource = parts[0]
        if resource not in self.tables:
            return httpx.Response(404, json={"detail": "Not Found"})
        table = self.tables[resource]

        if len(parts) == 1:
            if not path.endswith("/"):
                return httpx.Response(404, json={"detail": "Not Found"})
            match request.method:
                case "GET":
                    return httpx.Response(200, json=list(table.values()))
                case "POST":
                    payload = json.loads(request.content)
                    failed = self._failure(resource, payload)
                    if failed is not None:
                        return failed
                    return httpx.Response(201, json=self.insert(resource, payload))
            return httpx.Response(405, json={"detail": "Method Not Allowed"})

        id_key = int(parts[1])
        row = table.get(id_key)
        if row is None:
            return httpx.Response(404, json={"detail": f"{resource} {id_key} not found"})
        match request.method:
            case "GET":
                return httpx.Response(200, json=row)
            case "PUT":
                payload = json.loads(request.content)
                failed = self._failure(resource, payload)
                if failed is not None:
                    return failed
                table[id_key] = {**row, **payload, "id_key": id_key}
                return httpx.Response(200, json=table[id_key])
            case "DELETE":
                del table[id_key]
                return httpx.Response(204)
        return httpx.Response(405, json={"detail": "Method Not Allowed"})

    def _failure(self, resource: str, payload: dict) -> httpx.Response | None:
        failure = self.failures.get(resource)
        if failure is None or (failure.when is not None and not failure.when(payload)):
            return None
        if failure.body is None:
            return httpx.Response(failure.status)
        return httpx.Response(failure.status, json=failure.body)


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


def make_api(backend: FakeBackend) -> ShopApi:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(backend.handle),
        base_url="http://test",
    )
    return ShopApi(http)


@pytest.fixture
def api(backend: FakeBackend) -> ShopApi:
    return make_api(backend)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def cart(storage: MemoryStorage) -> CartStore:
    return CartStore(storage)


@pytest.fixture
def mouse(backend: FakeBackend) -> Product:
    return backend.seed_product(1, "Mouse", "10.00", stock=10)


@pytest.fixture
def keyboard(backend: FakeBackend) -> Product:
    return backend.seed_product(2, "Keyboard", "15.00", stock=5)


@pytest.fixture
def checkout(api: ShopApi, cart: CartStore) -> Checkout:
    return Checkout(
        api,
        cart,
        tax_rate=Decimal("0.21"),
        clock=lambda: FIXED_NOW,
        bill_numbers=lambda now: "FAC-TEST-1",
    )


def product(
    id_key: int = 1,
    name: str = "Mouse",
    price: str = "10.00",
    stock: int = 10,
    **extra: object,
) -> Product:
    return Product.model_validate(
        {"id_key": id_key, "name": name, "price": price, "stock": stock, **extra}
    )
