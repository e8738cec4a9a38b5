from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from samloop.core.definitions import SAMAction, SAMProposal, SAMState

SnapshotKind = Literal[
    "constructor-model",
    "action",
    "disallowed-action",
    "proposal",
    "no-proposal",
    "mutation",
    "no-model",
    "state",
    "no-state",
]


@dataclass(frozen=True, slots=True)
class ConstructorModelSnapshot:
    initial_model: Any
    kind: Literal["constructor-model"] = "constructor-model"


@dataclass(frozen=True, slots=True)
class ActionSnapshot:
    action: SAMAction
    from_state: SAMState | None
    kind: Literal["action"] = "action"


@dataclass(frozen=True, slots=True)
class DisallowedActionSnapshot:
    action: SAMAction
    state: SAMState
    kind: Literal["disallowed-action"] = "disallowed-action"


@dataclass(frozen=True, slots=True)
class ProposalSnapshot:
    proposal: SAMProposal
    action: SAMAction
    kind: Literal["proposal"] = "proposal"


@dataclass(frozen=True, slots=True)
class NoProposalSnapshot:
    action: SAMAction
    kind: Literal["no-proposal"] = "no-proposal"


@dataclass(frozen=True, slots=True)
class MutationSnapshot:
    old_model: Any
    new_model: Any
    diff: str
    kind: Literal["mutation"] = "mutation"


@dataclass(frozen=True, slots=True)
class NoModelSnapshot:
    proposal: SAMProposal
    model: Any
    kind: Literal["no-model"] = "no-model"


@dataclass(frozen=True, slots=True)
class StateSnapshot:
    model: Any
    state: SAMState
    kind: Literal["state"] = "state"


@dataclass(frozen=True, slots=True)
class NoStateSnapshot:
    model: Any
    kind: Literal["no-state"] = "no-state"


StepSnapshot = (
    ConstructorModelSnapshot
    | ActionSnapshot
    | DisallowedActionSnapshot
    | ProposalSnapshot
    | NoProposalSnapshot
    | MutationSnapshot
    | NoModelSnapshot
    | StateSnapshot
    | NoStateSnapshot
)
