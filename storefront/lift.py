"""
Lift — helpers for lifting values into storefront computations.

Re-exports from combinators.lift with storefront-specific additions.
"""

from __future__ import annotations

from kungfu import LazyCoroResult, Result, Error

from combinators.lift import catching_async

from storefront.repo import RepoError, RepoErrorKind


def from_result[T, E](result: Result[T, E]) -> LazyCoroResult[T, E]:
    """Lift an already computed Result into LazyCoroResult."""
    async def _run() -> Result[T, E]:
        return result
    return LazyCoroResult(_run)


def rejected[T](resource: str, message: str) -> LazyCoroResult[T, RepoError]:
    """
    A request refused before it was sent.

    Example:
        if order_id < 1:
            return rejected("order_details", f"Invalid id: {order_id}")
    """
    return from_result(Error(RepoError(RepoErrorKind.REJECTED, message, resource)))


__all__ = (
    "catching_async",
    "from_result",
    "rejected",
)
