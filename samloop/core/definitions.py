from __future__ import annotations

import copy
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class SAMIdentity(BaseModel):
    """Anything addressed by a stable string discriminator."""

    id: str


class SAMAction(SAMIdentity):
    """Caller intent. Subclass with a `Literal` id plus optional payload fields."""


class SAMProposal(SAMIdentity):
    """Candidate model mutation produced from an action."""


class SAMState(SAMIdentity):
    """Identity of a state definition, handed to subscribers."""


class RestrictionType(StrEnum):
    disallow = "disallow"
    strictly_allow = "strictly-allow"


def _action_id(action: SAMIdentity | str) -> str:
    return action if isinstance(action, str) else action.id


def action_ids(actions: Iterable[SAMIdentity | str]) -> frozenset[str]:
    return frozenset(_action_id(a) for a in actions)


@dataclass(frozen=True, slots=True)
class ActionRestrictions:
    type: RestrictionType
    actions: frozenset[str]

    @classmethod
    def disallow(cls, *actions: SAMIdentity | str) -> ActionRestrictions:
        return cls(type=RestrictionType.disallow, actions=action_ids(actions))

    @classmethod
    def strictly_allow(cls, *actions: SAMIdentity | str) -> ActionRestrictions:
        return cls(type=RestrictionType.strictly_allow, actions=action_ids(actions))


StatePredicate = Callable[..., bool]
NextActionFn = Callable[..., "SAMAction | None"]


@dataclass(frozen=True, slots=True)
class StateDefinition:
    """A named predicate over the model.

    - `is_state(model=...)` decides membership; definitions are matched in declaration order.
    - `restrictions` gate which actions may run while this state is current.
    - `next_action(model=...)` optionally derives a follow-up action after the state commits.
    """

    state: SAMState
    is_state: StatePredicate
    restrictions: ActionRestrictions | None = None
    next_action: NextActionFn | None = None


class ProposalFactory(Protocol):
    def __call__(self, *, action: Any) -> Any | Awaitable[Any]:  # pragma: no cover
        ...


class Presenter(Protocol):
    def __call__(self, *, proposal: Any, model: Any) -> Any:  # pragma: no cover
        ...


class Subscription(Protocol):
    def __call__(self, *, model: Any, state: SAMState) -> None:  # pragma: no cover
        ...


def protect(value: T) -> T:
    """Return an independent, structurally equal copy (no shared mutable backing)."""

    return copy.deepcopy(value)