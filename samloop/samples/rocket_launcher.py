from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Literal

from pydantic import BaseModel

from samloop.core.definitions import (
    ActionRestrictions,
    SAMAction,
    SAMProposal,
    SAMState,
    StateDefinition,
    Subscription,
)
from samloop.engine import SAM
from samloop.history import HistorySink

COUNTER_MAX = 10

Tick = Callable[[], Awaitable[None]]


class RocketModel(BaseModel):
    counter: int = COUNTER_MAX
    aborted: bool = False
    started: bool = False


# ---- actions ----


class StartCountdown(SAMAction):
    id: Literal["start-countdown"] = "start-countdown"


class DecrementCount(SAMAction):
    id: Literal["decrement-count"] = "decrement-count"


class Launch(SAMAction):
    id: Literal["launch"] = "launch"


class Abort(SAMAction):
    id: Literal["abort"] = "abort"


class ContinueCountdown(SAMAction):
    id: Literal["continue-countdown"] = "continue-countdown"


class ResetCountdown(SAMAction):
    id: Literal["reset-countdown"] = "reset-countdown"


# ---- proposals ----


class StartProposal(SAMProposal):
    id: Literal["start"] = "start"


class DecrementCountProposal(SAMProposal):
    id: Literal["decrement-count"] = "decrement-count"


class LaunchProposal(SAMProposal):
    id: Literal["launch"] = "launch"


class AbortProposal(SAMProposal):
    id: Literal["abort"] = "abort"


class ResetCountdownProposal(SAMProposal):
    id: Literal["reset-countdown"] = "reset-countdown"


async def _one_second() -> None:
    await asyncio.sleep(1)


def make_proposal_factory(*, tick: Tick = _one_second) -> Callable[..., Awaitable[SAMProposal | None]]:
    """Proposal factory; `tick` is awaited before every countdown decrement."""

    async def create_proposal(*, action: SAMAction) -> SAMProposal | None:
        if action.id == "start-countdown":
            return StartProposal()
        if action.id == "decrement-count":
            await tick()
            return DecrementCountProposal()
        if action.id == "launch":
            return LaunchProposal()
        if action.id == "abort":
            return AbortProposal()
        if action.id == "continue-countdown":
            return DecrementCountProposal()
        if action.id == "reset-countdown":
            return ResetCountdownProposal()
        return None

    return create_proposal


def present(*, proposal: SAMProposal, model: RocketModel) -> RocketModel:
    if proposal.id == "start":
        model.started = True

    if proposal.id == "reset-countdown":
        model.counter = COUNTER_MAX
        model.aborted = False
        model.started = False

    if proposal.id == "decrement-count" and model.counter - 1 >= 0:
        model.counter -= 1
        model.aborted = False

    if proposal.id == "abort":
        model.aborted = True

    return model


def _next_countdown_action(*, model: RocketModel) -> SAMAction | None:
    if model.counter > 0:
        return DecrementCount()
    if model.counter == 0:
        return Launch()
    return None


STATE_DEFINITIONS: tuple[StateDefinition, ...] = (
    StateDefinition(
        state=SAMState(id="ready"),
        is_state=lambda *, model: model.counter == COUNTER_MAX and not model.aborted and not model.started,
        restrictions=ActionRestrictions.strictly_allow(StartCountdown()),
    ),
    StateDefinition(
        state=SAMState(id="counting"),
        is_state=lambda *, model: 0 < model.counter <= COUNTER_MAX and not model.aborted and model.started,
        next_action=_next_countdown_action,
    ),
    StateDefinition(
        state=SAMState(id="launched"),
        is_state=lambda *, model: model.counter == 0 and model.started and not model.aborted,
        restrictions=ActionRestrictions.disallow(DecrementCount()),
    ),
    StateDefinition(
        state=SAMState(id="aborted"),
        is_state=lambda *, model: 0 <= model.counter <= COUNTER_MAX and model.aborted,
        restrictions=ActionRestrictions.strictly_allow(ContinueCountdown(), ResetCountdown()),
    ),
)


def make_rocket_launcher(
    *,
    model: RocketModel | None = None,
    tick: Tick = _one_second,
    subscriptions: Iterable[Subscription] = (),
    debug: bool = False,
    history_sink: HistorySink | None = None,
) -> SAM[RocketModel]:
    return SAM(
        model=model or RocketModel(),
        create_proposal=make_proposal_factory(tick=tick),
        presenter=present,
        state_definitions=STATE_DEFINITIONS,
        subscriptions=subscriptions,
        debug=debug,
        history_sink=history_sink,
    )
