"""Enum-based workflow state machine pattern.

Defines workflow states as Python enums with explicit transition validation.
The state definitions are independent of where the state is stored.

Example domain: rental lifecycle. A rental is active until its return is
recorded, and a returned rental never changes again.
"""

from datetime import date
from enum import Enum


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class RentalState(str, Enum):
    """Rental lifecycle states."""

    ACTIVE = "active"
    RETURNED = "returned"

    @classmethod
    def of(cls, return_date: date | None) -> "RentalState":
        """Derive the state from the stored return date."""
        return cls.ACTIVE if return_date is None else cls.RETURNED


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

# Allowed transitions: {current_state: [allowed_next_states]}
_RENTAL_TRANSITIONS: dict[RentalState, list[RentalState]] = {
    RentalState.ACTIVE: [RentalState.RETURNED],
    RentalState.RETURNED: [],  # terminal
}


class InvalidTransition(ValueError):
    """Raised when a transition is not allowed from the current state."""

    def __init__(self, from_state: RentalState, to_state: RentalState):
        self.from_state = from_state
        self.to_state = to_state
        allowed = [s.value for s in _RENTAL_TRANSITIONS.get(from_state, [])]
        super().__init__(
            f"Cannot transition from {from_state.value} to {to_state.value}. "
            f"Allowed: {allowed}"
        )


def can_transition(from_state: RentalState, to_state: RentalState) -> bool:
    """Check if a transition is allowed from the current state."""
    return to_state in _RENTAL_TRANSITIONS.get(from_state, [])


def ensure_transition(from_state: RentalState, to_state: RentalState) -> None:
    """Raise InvalidTransition unless from_state -> to_state is allowed."""
    if not can_transition(from_state, to_state):
        raise InvalidTransition(from_state, to_state)
