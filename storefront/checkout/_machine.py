"""
Checkout state machine — forward only.

There is no backward edge: once a record is created the attempt can only
go on or stop, which is exactly the no-rollback guarantee.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from storefront.checkout._types import Phase, Stage

logger = logging.getLogger(__name__)

type PhaseObserver = Callable[[Phase, Phase], None]
"""Called with (previous, current) after every transition."""

_NEXT: dict[Phase, Phase] = {
    Phase.IDLE: Phase.VALIDATING_STOCK,
    Phase.VALIDATING_STOCK: Phase.CREATING_CLIENT,
    Phase.CREATING_CLIENT: Phase.CREATING_ADDRESS,
    Phase.CREATING_ADDRESS: Phase.CREATING_BILL,
    Phase.CREATING_BILL: Phase.CREATING_ORDER,
    Phase.CREATING_ORDER: Phase.CREATING_LINES,
    Phase.CREATING_LINES: Phase.SUCCEEDED,
}

_STAGE_OF: dict[Phase, Stage] = {
    Phase.CREATING_CLIENT: Stage.CLIENT,
    Phase.CREATING_ADDRESS: Stage.ADDRESS,
    Phase.CREATING_BILL: Stage.BILL,
    Phase.CREATING_ORDER: Stage.ORDER,
    Phase.CREATING_LINES: Stage.LINE_ITEMS,
}


class InvalidTransition(RuntimeError):
    def __init__(self, current: Phase, requested: Phase) -> None:
        super().__init__(f"cannot go from {current.name} to {requested.name}")
        self.current = current
        self.requested = requested


class CheckoutMachine:
    """
    One checkout attempt's progress.

    Example:
        machine = CheckoutMachine()
        machine.advance(Phase.VALIDATING_STOCK)
        machine.advance(Phase.CREATING_CLIENT)
        machine.fail(Stage.CLIENT)
        machine.phase         # Phase.FAILED
        machine.failed_stage  # Stage.CLIENT
    """

    def __init__(self, observer: PhaseObserver | None = None) -> None:
        self.phase = Phase.IDLE
        self.failed_stage: Stage | None = None
        self.history: list[Phase] = [Phase.IDLE]
        self._observer = observer

    @property
    def stage(self) -> Stage | None:
        """Creation stage currently running, if any."""
        return _STAGE_OF.get(self.phase)

    def advance(self, to: Phase) -> None:
        """Move to the next phase. Anything but the direct successor is refused."""
        if _NEXT.get(self.phase) is not to:
            raise InvalidTransition(self.phase, to)
        self._move(to)

    def fail(self, stage: Stage | None = None) -> None:
        """
        Stop the attempt.

        stage is the creation stage that failed; None when the attempt was
        refused before anything was created.
        """
        if self.phase.is_terminal:
            raise InvalidTransition(self.phase, Phase.FAILED)
        self.failed_stage = stage
        self._move(Phase.FAILED)

    def _move(self, to: Phase) -> None:
        previous = self.phase
        self.phase = to
        self.history.append(to)
        logger.debug("checkout %s -> %s", previous.name, to.name)
        if self._observer is not None:
            self._observer(previous, to)


__all__ = ("PhaseObserver", "InvalidTransition", "CheckoutMachine")
