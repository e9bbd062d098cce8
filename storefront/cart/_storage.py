"""
Cart storage — where the cart survives between sessions.

Stored format (one entry per key):

    [{"id_key": 3, "name": "Mouse", "price": 10.0, "stock": 4,
      "quantity": 2, "category_id": 1}, ...]
"""

from __future__ import annotations

import json
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from storefront.cart._types import CartLine

# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol — Users Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class CartStorage(Protocol):
    """
    Durable key/value text storage for the cart.

    Example:
        class RedisStorage:
            def __init__(self, client: Redis) -> None:
                self.client = client

            def read(self, key: str) -> str | None:
                data = self.client.get(key)
                return data.decode() if data else None

            def write(self, key: str, data: str) -> None:
                self.client.set(key, data)

            def remove(self, key: str) -> None:
                self.client.delete(key)
    """

    def read(self, key: str) -> str | None:
        """Stored text, or None when nothing is stored."""
        ...

    def write(self, key: str, data: str) -> None:
        """Replace stored text."""
        ...

    def remove(self, key: str) -> None:
        """Forget key. Missing key is not an error."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStorage:
    """In-process storage. Does not survive a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, data: str) -> None:
        self.writes += 1
        self.data[key] = data

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


# ═══════════════════════════════════════════════════════════════════════════════
# File Storage — One JSON File Per Key
# ═══════════════════════════════════════════════════════════════════════════════


class FileStorage:
    """
    Stores each key as `<directory>/<key>.json`.

    Writes go to a temp file in the same directory and are moved over the
    target, so a crash never leaves a half written cart.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        try:
            return self.path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, key: str, data: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
            os.replace(tmp, self.path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self.path(key).unlink(missing_ok=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Codec
# ═══════════════════════════════════════════════════════════════════════════════


class CorruptCart(ValueError):
    """Stored cart text could not be decoded."""


class _StoredLine(BaseModel):
    model_config = ConfigDict(extra="allow")

    id_key: int
    name: str
    price: Decimal = Field(ge=0)
    stock: int
    quantity: int = Field(ge=1)


_stored_lines = TypeAdapter(list[_StoredLine])

_LINE_FIELDS = {"id_key", "name", "price", "stock", "quantity"}


def encode_lines(lines: tuple[CartLine, ...]) -> str:
    return json.dumps([
        {
            **line.extra,
            "id_key": line.product_id,
            "name": line.name,
            "price": float(line.unit_price),
            "stock": line.stock,
            "quantity": line.quantity,
        }
        for line in lines
    ])


def decode_lines(data: str) -> tuple[CartLine, ...]:
    """
    Parse stored text back into lines.

    Duplicate product ids are merged so the one-line-per-product rule
    holds even for hand-edited data. Raises CorruptCart on anything else
    unexpected.
    """
    try:
        stored = _stored_lines.validate_json(data)
    except ValidationError as exc:
        raise CorruptCart(str(exc)) from exc

    merged: dict[int, CartLine] = {}
    for item in stored:
        existing = merged.get(item.id_key)
        if existing is not None:
            merged[item.id_key] = existing.with_quantity(existing.quantity + item.quantity)
            continue
        merged[item.id_key] = CartLine(
            product_id=item.id_key,
            name=item.name,
            unit_price=item.price,
            quantity=item.quantity,
            stock=item.stock,
            extra={k: v for k, v in (item.model_extra or {}).items() if k not in _LINE_FIELDS},
        )
    return tuple(merged.values())


__all__ = (
    "CartStorage",
    "MemoryStorage",
    "FileStorage",
    "CorruptCart",
    "encode_lines",
    "decode_lines",
)
