from enum import Enum


class PublishState(str, Enum):
    VALIDATING_PAYMENT = "validating_payment"
    RESOLVING_IDENTITY = "resolving_identity"
    UPSERTING_PROFILE = "upserting_profile"
    REPLACING_CONTENT = "replacing_content"
    RECORDING_PURCHASE = "recording_purchase"
    DONE = "done"
    ABORTED = "aborted"


_FORWARD: dict[PublishState, PublishState] = {
    PublishState.VALIDATING_PAYMENT: PublishState.RESOLVING_IDENTITY,
    PublishState.RESOLVING_IDENTITY: PublishState.UPSERTING_PROFILE,
    PublishState.UPSERTING_PROFILE: PublishState.REPLACING_CONTENT,
    PublishState.REPLACING_CONTENT: PublishState.RECORDING_PURCHASE,
    PublishState.RECORDING_PURCHASE: PublishState.DONE,
}

TERMINAL_STATES = frozenset({PublishState.DONE, PublishState.ABORTED})


def can_transition(current: PublishState, new: PublishState) -> bool:
    """
    Determine if a publish state transition is allowed.

    The pipeline only moves forward one step at a time; any non-terminal
    state may abort.
    """
    if current in TERMINAL_STATES:
        return False

    if new == PublishState.ABORTED:
        return True

    return _FORWARD.get(current) == new


def advance(current: PublishState, new: PublishState) -> PublishState:
    """
    Return the new state.
    Raises ValueError if the transition is invalid.
    """
    if not can_transition(current, new):
        raise ValueError(f"Invalid transition from {current.value} to {new.value}")
    return new
