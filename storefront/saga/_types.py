"""
Saga types — core data structures.

This saga never compensates: the backend has no way to undo a creation
inside a transaction. Instead every created record is written to a Ledger,
and a failure reports what was left behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Callable
from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# SagaStep — Single Named Step
# ═══════════════════════════════════════════════════════════════════════════════

type IdOf[T] = Callable[[T], int | None]
"""Extracts the backend id of what a step created (None: nothing created)."""


@dataclass(frozen=True, slots=True)
class SagaStep[T, E]:
    """
    A single saga step: stage name + lazy action.

    When the action succeeds and id_of returns an id, the record is
    appended to the ledger.
    """

    stage: str
    action: LazyCoroResult[T, E]
    id_of: IdOf[T] | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Ledger — What Exists Remotely Because Of Us
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Created:
    """One remote record created by a step."""

    stage: str
    id_key: int


@dataclass(slots=True)
class Ledger:
    """Append-only record of created remote entities, in creation order."""

    entries: list[Created] = field(default_factory=list[Created])

    def record(self, stage: str, id_key: int) -> None:
        self.entries.append(Created(stage, id_key))

    def freeze(self) -> tuple[Created, ...]:
        return tuple(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaResult[T]:
    """Successful saga result with metadata."""

    value: T
    steps_executed: int
    created: tuple[Created, ...]


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """
    Saga error.

    created lists the records that now exist without the rest of the
    saga; nothing was rolled back.
    """

    error: E
    stage: str
    steps_executed: int
    created: tuple[Created, ...]

    @property
    def orphaned(self) -> bool:
        return bool(self.created)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "IdOf",
    "SagaStep",
    "Created",
    "Ledger",
    "SagaResult",
    "SagaError",
)
