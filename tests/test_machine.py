import pytest

from storefront.checkout import CheckoutMachine, InvalidTransition, Phase, Stage

CREATION_PATH = [
    Phase.VALIDATING_STOCK,
    Phase.CREATING_CLIENT,
    Phase.CREATING_ADDRESS,
    Phase.CREATING_BILL,
    Phase.CREATING_ORDER,
    Phase.CREATING_LINES,
    Phase.SUCCEEDED,
]


def test_happy_path() -> None:
    seen: list[tuple[Phase, Phase]] = []
    machine = CheckoutMachine(lambda before, after: seen.append((before, after)))

    for phase in CREATION_PATH:
        machine.advance(phase)

    assert machine.phase is Phase.SUCCEEDED
    assert machine.history == [Phase.IDLE, *CREATION_PATH]
    assert seen[0] == (Phase.IDLE, Phase.VALIDATING_STOCK)
    assert seen[-1] == (Phase.CREATING_LINES, Phase.SUCCEEDED)


def test_stage_follows_phase() -> None:
    machine = CheckoutMachine()
    assert machine.stage is None

    machine.advance(Phase.VALIDATING_STOCK)
    machine.advance(Phase.CREATING_CLIENT)
    assert machine.stage is Stage.CLIENT

    machine.advance(Phase.CREATING_ADDRESS)
    machine.advance(Phase.CREATING_BILL)
    assert machine.stage is Stage.BILL


def test_backward_transition_is_rejected() -> None:
    machine = CheckoutMachine()
    machine.advance(Phase.VALIDATING_STOCK)
    machine.advance(Phase.CREATING_CLIENT)
    machine.advance(Phase.CREATING_ADDRESS)

    with pytest.raises(InvalidTransition) as info:
        machine.advance(Phase.CREATING_CLIENT)

    assert info.value.current is Phase.CREATING_ADDRESS
    assert machine.phase is Phase.CREATING_ADDRESS


def test_skipping_is_rejected() -> None:
    machine = CheckoutMachine()

    with pytest.raises(InvalidTransition):
        machine.advance(Phase.CREATING_BILL)


def test_fail_records_stage() -> None:
    machine = CheckoutMachine()
    for phase in CREATION_PATH[:4]:
        machine.advance(phase)

    machine.fail(Stage.BILL)

    assert machine.phase is Phase.FAILED
    assert machine.failed_stage is Stage.BILL


@pytest.mark.parametrize("terminal", ["succeeded", "failed"])
def test_terminal_phases_are_final(terminal: str) -> None:
    machine = CheckoutMachine()
    if terminal == "succeeded":
        for phase in CREATION_PATH:
            machine.advance(phase)
    else:
        machine.fail()

    with pytest.raises(InvalidTransition):
        machine.fail()
    with pytest.raises(InvalidTransition):
        machine.advance(Phase.VALIDATING_STOCK)
