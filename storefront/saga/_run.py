"""
Saga execution, forward only.

Steps run until the first failure; nothing already created is undone.
"""

from __future__ import annotations

from combinators import parallel as C_parallel, lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from storefront.saga._types import (
    SagaStep,
    SagaResult,
    SagaError,
    Ledger,
)

# ═══════════════════════════════════════════════════════════════════════════════
# run_step() — Execute single step
# ═══════════════════════════════════════════════════════════════════════════════


async def run_step[T, E](
    step: SagaStep[T, E],
    ledger: Ledger,
) -> Result[T, E]:
    """Execute single step, recording what it created on success."""
    result = await step.action
    match result:
        case Ok(value):
            if step.id_of is not None:
                id_key = step.id_of(value)
                if id_key is not None:
                    ledger.record(step.stage, id_key)
            return Ok(value)
        case Error(e):
            return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# run_all() — Execute independent steps concurrently
# ═══════════════════════════════════════════════════════════════════════════════


async def run_all[T, E](
    steps: tuple[SagaStep[T, E], ...],
    ledger: Ledger,
) -> Result[tuple[T, ...], E]:
    """
    Execute steps concurrently and wait for every one of them.

    All must succeed. The first error (in step order) is returned; steps
    that did succeed stay recorded in the ledger.
    """
    if not steps:
        return Ok(())

    def make_op(s: SagaStep[T, E]) -> LazyCoroResult[Result[T, E], Exception]:
        """Wrap step execution into LazyCoroResult."""
        return L.catching_async(
            lambda step=s: run_step(step, ledger),
            on_error=lambda e: e,
        )

    parallel_result = await C_parallel(*[make_op(s) for s in steps])

    match parallel_result:
        case Error(exc):
            # run_step does not raise, so this is a bug, not a remote failure
            raise exc
        case Ok(results):
            errors = [r for r in results if isinstance(r, Error)]
            if errors:
                return Error(errors[0].value)
            return Ok(tuple(r.value for r in results if isinstance(r, Ok)))


# ═══════════════════════════════════════════════════════════════════════════════
# Saga — Sequential Runner With Shared Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class Saga:
    """
    Runs steps one after another, stopping at the first failure.

    Later steps are built from earlier results, so the caller drives the
    sequence and the saga keeps count and ledger.

    Example:
        saga = S.Saga()

        match await saga.run(S.step("client", create_client, id_of=by_id)):
            case Error(e):
                return Error(e)   # e.stage == "client", e.created == ()
            case Ok(client):
                pass

        match await saga.run(S.step("bill", create_bill(client), id_of=by_id)):
            case Error(e):
                return Error(e)   # e.created == (Created("client", 7),)
            case Ok(bill):
                return Ok(saga.complete(bill))
    """

    def __init__(self) -> None:
        self.ledger = Ledger()
        self.steps_executed = 0

    async def run[T, E](self, step: SagaStep[T, E]) -> Result[T, SagaError[E]]:
        self.steps_executed += 1
        result = await run_step(step, self.ledger)
        match result:
            case Ok(value):
                return Ok(value)
            case Error(e):
                return Error(self._error(e, step.stage))

    async def run_all[T, E](
        self,
        stage: str,
        steps: tuple[SagaStep[T, E], ...],
    ) -> Result[tuple[T, ...], SagaError[E]]:
        self.steps_executed += len(steps)
        result = await run_all(steps, self.ledger)
        match result:
            case Ok(values):
                return Ok(values)
            case Error(e):
                return Error(self._error(e, stage))

    def complete[T](self, value: T) -> SagaResult[T]:
        return SagaResult(
            value=value,
            steps_executed=self.steps_executed,
            created=self.ledger.freeze(),
        )

    def _error[E](self, error: E, stage: str) -> SagaError[E]:
        return SagaError(
            error=error,
            stage=stage,
            steps_executed=self.steps_executed,
            created=self.ledger.freeze(),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# run() — Execute Single Step
# ═══════════════════════════════════════════════════════════════════════════════


async def run[T, E](step: SagaStep[T, E]) -> Result[SagaResult[T], SagaError[E]]:
    """
    Execute one saga step on its own.

    Example:
        match await S.run(S.step("review", api.reviews.create(payload))):
            case Ok(r):
                print(r.value)
            case Error(e):
                print(f"Failed at {e.stage}")
    """
    saga = Saga()
    result = await saga.run(step)
    match result:
        case Ok(value):
            return Ok(saga.complete(value))
        case Error(e):
            return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("run_step", "run_all", "run", "Saga")
