"""
Repository — uniform CRUD over one REST collection.

Every operation returns a LazyCoroResult: nothing is sent until it is
awaited, and failures come back as Error(RepoError) instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Self

import httpx
from pydantic import TypeAdapter
from kungfu import LazyCoroResult, Result, Ok, Error
from combinators import lift as L

from storefront.config import Settings
from storefront.repo._entities import (
    Entity,
    Input,
    Category,
    Product,
    Client,
    Address,
    Bill,
    Order,
    OrderDetail,
    Review,
)
from storefront.repo._types import RepoError, to_repo_error

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Repository
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Repository[T: Entity]:
    """
    CRUD client for one resource collection.

    Note: the backend wants a trailing slash on the collection URL (list,
    create) and none on item URLs.

    Example:
        products = Repository(http, "/products", Product)
        match await products.get_one(3):
            case Ok(product):
                ...
            case Error(e) if e.is_not_found:
                ...
    """

    http: httpx.AsyncClient
    resource: str
    model: type[T]

    @property
    def name(self) -> str:
        return self.resource.strip("/")

    def _item_url(self, id_key: int) -> str:
        return f"{self.resource}/{id_key}"

    def _collection_url(self) -> str:
        return f"{self.resource}/"

    def _lazy[R](
        self, call: Callable[[], Awaitable[R]]
    ) -> LazyCoroResult[R, RepoError]:
        return L.catching_async(call, on_error=self._fail)

    def _fail(self, exc: Exception) -> RepoError:
        error = to_repo_error(self.name, exc)
        logger.debug("%s request failed: %s", self.name, error)
        return error

    def list_all(self) -> LazyCoroResult[list[T], RepoError]:
        adapter = TypeAdapter(list[self.model])

        async def fetch() -> list[T]:
            response = await self.http.get(self._collection_url())
            response.raise_for_status()
            return adapter.validate_python(response.json())

        return self._lazy(fetch)

    def get_one(self, id_key: int) -> LazyCoroResult[T, RepoError]:
        async def fetch() -> T:
            response = await self.http.get(self._item_url(id_key))
            response.raise_for_status()
            return self.model.model_validate(response.json())

        return self._lazy(fetch)

    def create(self, payload: Input) -> LazyCoroResult[T, RepoError]:
        async def send() -> T:
            response = await self.http.post(
                self._collection_url(), json=payload.to_wire()
            )
            response.raise_for_status()
            return self.model.model_validate(response.json())

        return self._lazy(send)

    def update(self, id_key: int, payload: Input) -> LazyCoroResult[T, RepoError]:
        async def send() -> T:
            response = await self.http.put(self._item_url(id_key), json=payload.to_wire())
            response.raise_for_status()
            return self.model.model_validate(response.json())

        return self._lazy(send)

    def delete(
        self, id_key: int, *, missing_ok: bool = True
    ) -> LazyCoroResult[None, RepoError]:
        """
        Delete one resource.

        With missing_ok (default) an already deleted resource counts as
        success.
        """
        async def send() -> Result[None, RepoError]:
            try:
                response = await self.http.delete(self._item_url(id_key))
                response.raise_for_status()
            except Exception as exc:
                error = self._fail(exc)
                if error.is_not_found and missing_ok:
                    return Ok(None)
                return Error(error)
            return Ok(None)

        return LazyCoroResult(send)


# ═══════════════════════════════════════════════════════════════════════════════
# ShopApi — All Collections Over One Connection
# ═══════════════════════════════════════════════════════════════════════════════


class ShopApi:
    """
    The eight backend collections sharing one httpx.AsyncClient.

    Example:
        async with ShopApi.connect(settings) as api:
            products = await api.products.list_all()
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self.http = http
        self.products = Repository(http, "/products", Product)
        self.categories = Repository(http, "/categories", Category)
        self.clients = Repository(http, "/clients", Client)
        self.addresses = Repository(http, "/addresses", Address)
        self.bills = Repository(http, "/bills", Bill)
        self.orders = Repository(http, "/orders", Order)
        self.order_details = Repository(http, "/order_details", OrderDetail)
        self.reviews = Repository(http, "/reviews", Review)

    @classmethod
    def connect(cls, settings: Settings) -> ShopApi:
        http = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.timeout,
            headers={"Accept": "application/json"},
        )
        return cls(http)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ("Repository", "ShopApi")
