"""
Cart — the customer's in-progress purchase.

    from storefront import cart as K

    store = K.CartStore(K.FileStorage(settings.cart_dir), key=settings.cart_key)
    store.add_item(product, 2)
    snapshot = store.snapshot()
"""

from __future__ import annotations

from storefront.cart._types import CartLine, CartSnapshot, CartListener
from storefront.cart._storage import (
    CartStorage,
    MemoryStorage,
    FileStorage,
    CorruptCart,
    encode_lines,
    decode_lines,
)
from storefront.cart._store import CartStore

__all__ = (
    "CartLine",
    "CartSnapshot",
    "CartListener",
    "CartStorage",
    "MemoryStorage",
    "FileStorage",
    "CorruptCart",
    "encode_lines",
    "decode_lines",
    "CartStore",
)
