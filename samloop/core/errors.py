from __future__ import annotations

from enum import StrEnum


class SAMError(RuntimeError):
    pass


class InvalidInitialModelError(SAMError):
    """The model passed at construction evaluates to no state."""


class ActionBlockedError(SAMError):
    def __init__(self, *, action_id: str, state_id: str) -> None:
        self.action_id = action_id
        self.state_id = state_id
        super().__init__(f"Action '{action_id}' blocked in state '{state_id}'")


class StateConflictError(SAMError):
    pass


class HaltReason(StrEnum):
    """Soft halts end a session without a transition. They are never raised."""

    no_proposal = "no-proposal"
    no_model = "no-model"
    no_state = "no-state"
