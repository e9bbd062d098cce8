"""
Saga — multi-step remote creation without rollback.

    from storefront import saga as S

    saga = S.Saga()
    client = await saga.run(S.step("client", api.clients.create(c), id_of=by_id))
    lines = await saga.run_all("line-items", tuple(line_steps))
"""

from __future__ import annotations

from storefront.saga._types import (
    IdOf,
    SagaStep,
    Created,
    Ledger,
    SagaResult,
    SagaError,
)
from storefront.saga._step import step, from_async
from storefront.saga._run import run_step, run_all, run, Saga

__all__ = (
    "IdOf",
    "SagaStep",
    "Created",
    "Ledger",
    "SagaResult",
    "SagaError",
    "step",
    "from_async",
    "run_step",
    "run_all",
    "run",
    "Saga",
)
