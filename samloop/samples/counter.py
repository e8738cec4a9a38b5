from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal

from samloop.core.definitions import SAMAction, SAMProposal, SAMState, StateDefinition, Subscription
from samloop.engine import SAM
from samloop.history import HistorySink

COUNT_MAX = 10

CounterModel = dict[str, int]


class ChangeCount(SAMAction):
    id: Literal["change-count-action"] = "change-count-action"
    count: int


class ChangeCountProposal(SAMProposal):
    id: Literal["change-count-proposal"] = "change-count-proposal"
    count: int


async def create_proposal(*, action: SAMAction) -> SAMProposal | None:
    if isinstance(action, ChangeCount):
        return ChangeCountProposal(count=action.count)
    return None


def present(*, proposal: SAMProposal, model: CounterModel) -> CounterModel | None:
    # Out-of-range counts are rejected rather than clamped.
    if isinstance(proposal, ChangeCountProposal) and 0 <= proposal.count <= COUNT_MAX:
        model["count"] = proposal.count
        return model
    return None


STATE_DEFINITIONS: tuple[StateDefinition, ...] = (
    StateDefinition(
        state=SAMState(id="show-count"),
        is_state=lambda *, model: model["count"] < COUNT_MAX,
    ),
    StateDefinition(
        state=SAMState(id="max-count"),
        is_state=lambda *, model: model["count"] == COUNT_MAX,
    ),
)


def make_counter(
    *,
    count: int = 0,
    subscriptions: Iterable[Subscription] = (),
    debug: bool = False,
    history_sink: HistorySink | None = None,
) -> SAM[Any]:
    return SAM(
        model={"count": count},
        create_proposal=create_proposal,
        presenter=present,
        state_definitions=STATE_DEFINITIONS,
        subscriptions=subscriptions,
        debug=debug,
        history_sink=history_sink,
    )
