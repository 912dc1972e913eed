"""Unit tests for the publish state machine."""

import pytest

from footprint.domain.state import TERMINAL_STATES, PublishState, advance, can_transition

PIPELINE = [
    PublishState.VALIDATING_PAYMENT,
    PublishState.RESOLVING_IDENTITY,
    PublishState.UPSERTING_PROFILE,
    PublishState.REPLACING_CONTENT,
    PublishState.RECORDING_PURCHASE,
    PublishState.DONE,
]


def test_forward_chain_is_allowed():
    state = PIPELINE[0]
    for nxt in PIPELINE[1:]:
        state = advance(state, nxt)
    assert state == PublishState.DONE


@pytest.mark.parametrize("state", PIPELINE[:-1])
def test_any_active_state_can_abort(state):
    assert can_transition(state, PublishState.ABORTED)


def test_cannot_skip_steps():
    with pytest.raises(ValueError):
        advance(PublishState.VALIDATING_PAYMENT, PublishState.UPSERTING_PROFILE)


def test_cannot_move_backwards():
    assert not can_transition(PublishState.REPLACING_CONTENT, PublishState.RESOLVING_IDENTITY)


@pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES, key=lambda s: s.value))
def test_terminal_states_are_final(terminal):
    for target in PublishState:
        assert not can_transition(terminal, target)
