"""
Saga step creation.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable
from kungfu import LazyCoroResult
from combinators import lift as L

from storefront.saga._types import SagaStep, IdOf

# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    stage: str,
    action: LazyCoroResult[T, E],
    id_of: IdOf[T] | None = None,
) -> SagaStep[T, E]:
    """
    Create a named saga step.

    Args:
        stage: Name reported when this step fails
        action: The operation to perform (LazyCoroResult)
        id_of: How to read the created record's id from the result

    Example:
        from storefront import saga as S

        bill = S.step(
            "bill",
            api.bills.create(payload),
            id_of=lambda b: b.id_key,
        )
    """
    return SagaStep(stage=stage, action=action, id_of=id_of)


# ═══════════════════════════════════════════════════════════════════════════════
# from_async() — Create step from async callable
# ═══════════════════════════════════════════════════════════════════════════════


def from_async[T, E](
    stage: str,
    action: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
    id_of: IdOf[T] | None = None,
) -> SagaStep[T, E]:
    """
    Create step from async callable with error handling.

    Example:
        S.from_async(
            "client",
            lambda: legacy_api.register(form),
            on_error=lambda e: Failure(str(e)),
            id_of=lambda c: c.id,
        )
    """
    return SagaStep(
        stage=stage,
        action=L.catching_async(action, on_error=on_error),
        id_of=id_of,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("step", "from_async")
