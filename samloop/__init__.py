"""samloop: an in-process State-Action-Model (SAM) loop.

    engine = SAM(model=..., create_proposal=..., presenter=..., state_definitions=[...])
    await engine.execute(SomeAction())
"""
from __future__ import annotations

from samloop.core.definitions import (
    ActionRestrictions,
    RestrictionType,
    SAMAction,
    SAMProposal,
    SAMState,
    StateDefinition,
)
from samloop.core.errors import (
    ActionBlockedError,
    HaltReason,
    InvalidInitialModelError,
    SAMError,
    StateConflictError,
)
from samloop.core.matcher import assert_exclusive_states, find_state_conflicts
from samloop.engine import SAM
from samloop.history import HistoryEntry

__version__ = "0.1.0"

__all__ = [
    "SAM",
    "ActionBlockedError",
    "ActionRestrictions",
    "HaltReason",
    "HistoryEntry",
    "InvalidInitialModelError",
    "RestrictionType",
    "SAMAction",
    "SAMError",
    "SAMProposal",
    "SAMState",
    "StateConflictError",
    "StateDefinition",
    "__version__",
    "assert_exclusive_states",
    "find_state_conflicts",
]
