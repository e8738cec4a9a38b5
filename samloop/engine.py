from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

from samloop.config import debug_enabled
from samloop.core.definitions import (
    Presenter,
    ProposalFactory,
    SAMAction,
    SAMState,
    StateDefinition,
    Subscription,
    protect,
)
from samloop.core.errors import ActionBlockedError, HaltReason, InvalidInitialModelError
from samloop.core.gate import check_action
from samloop.core.matcher import match_state, matching_states
from samloop.core.session import Session
from samloop.core.snapshots import (
    ActionSnapshot,
    ConstructorModelSnapshot,
    DisallowedActionSnapshot,
    MutationSnapshot,
    NoModelSnapshot,
    NoProposalSnapshot,
    NoStateSnapshot,
    ProposalSnapshot,
    StateSnapshot,
)
from samloop.core.subscriptions import SubscriptionRegistry
from samloop.diffing import model_diff
from samloop.history import HistoryEntry, HistoryRecorder, HistorySink
from samloop.sinks import default_history_sink

logger = logging.getLogger(__name__)

M = TypeVar("M")


def _log_detached_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("detached SAM session failed: %s", exc, exc_info=exc)


class SAM(Generic[M]):
    """State-Action-Model loop over a single, engine-owned model.

    Per action: gate -> proposal (may suspend) -> gate again -> presenter ->
    state match -> subscribers -> optional auto-derived next action, repeated
    within the same session until no next action is derived or a step halts.

    Every value handed to a collaborator is a deep copy; the engine keeps the
    only live reference to the model.

    Overlapping `execute` calls are not queued. The proposal factory is the
    only suspension point and everything from the second gate check to the
    state commit runs without yielding, so each mutation is atomic on the
    event loop and is checked against whatever state is current at that time.
    """

    def __init__(
        self,
        *,
        model: M,
        create_proposal: ProposalFactory,
        presenter: Presenter,
        state_definitions: Sequence[StateDefinition],
        subscriptions: Iterable[Subscription] = (),
        debug: bool | None = None,
        history_sink: HistorySink | None = None,
    ) -> None:
        if debug is None:
            debug = debug_enabled()
        if debug and history_sink is None:
            history_sink = default_history_sink()

        self._create_proposal = create_proposal
        self._presenter = presenter
        self._definitions: tuple[StateDefinition, ...] = tuple(state_definitions)
        self._subscriptions = SubscriptionRegistry(subscriptions)
        self._history = HistoryRecorder(enabled=debug, sink=history_sink)

        self._model: M = protect(model)
        self._initial_model: M = protect(model)

        session = Session()
        self._history.add(snapshot=ConstructorModelSnapshot(initial_model=self._model), session=session)

        definition = match_state(definitions=self._definitions, model=self._model)
        if definition is None:
            session.lifecycle.fail()
            raise InvalidInitialModelError("Please pass in an initial model that evaluates to a state")

        overlapping = matching_states(definitions=self._definitions, model=self._model)
        if len(overlapping) > 1:
            logger.warning(
                "initial model matches several states (%s); using '%s'",
                ",".join(d.state.id for d in overlapping),
                definition.state.id,
            )

        self._current: StateDefinition = definition
        self._initial_state: SAMState = protect(definition.state)

        self._history.add(snapshot=StateSnapshot(model=self._model, state=definition.state), session=session)
        self._subscriptions.notify(model=self._model, state=definition.state)
        session.lifecycle.finish()

    # ---- read side ----

    def get_initial_model(self) -> M:
        return protect(self._initial_model)

    def get_initial_state(self) -> SAMState:
        return protect(self._initial_state)

    def get_model(self) -> M:
        return protect(self._model)

    def get_state(self) -> SAMState:
        return protect(self._current.state)

    @property
    def history(self) -> list[HistoryEntry]:
        return self._history.get_stack()

    async def flush_history(self) -> None:
        await self._history.flush()

    # ---- subscriptions ----

    def subscribe(self, subscription: Subscription) -> None:
        self._subscriptions.add(subscription)

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.remove(subscription)

    # ---- write side ----

    async def execute(self, action: SAMAction) -> None:
        """Run `action` and everything it chains in a fresh session.

        Returns once the session ends. `ActionBlockedError` and collaborator
        errors from any step of the chain are re-raised here; soft halts are not.
        """

        await self._run(action=action, session=Session(), from_state=None)

    def dispatch(self, action: SAMAction) -> asyncio.Task[None]:
        """Fire-and-forget `execute`; failures are logged instead of raised."""

        task = asyncio.create_task(self.execute(action))
        task.add_done_callback(_log_detached_failure)
        return task

    async def start(self) -> None:
        """Run the initial state's auto-next-action, if it derives one."""

        action = self._derive_next_action(definition=self._current)
        if action is None:
            return
        await self._run(action=action, session=Session(), from_state=self._current.state)

    # ---- loop ----

    async def _run(self, *, action: SAMAction, session: Session, from_state: SAMState | None) -> None:
        logger.debug("session %s: opened with '%s'", session.id, action.id)

        # Iterative so chain length never grows the call stack.
        next_action: SAMAction | None = action
        try:
            while next_action is not None:
                next_action, from_state = await self._step(action=next_action, session=session, from_state=from_state)
                if session.halt_reason is not None:
                    return
        except Exception:
            session.lifecycle.fail()
            raise

        session.lifecycle.finish()
        logger.debug("session %s: completed after %d step(s)", session.id, session.steps)

    async def _step(
        self,
        *,
        action: SAMAction,
        session: Session,
        from_state: SAMState | None,
    ) -> tuple[SAMAction | None, SAMState | None]:
        session.steps += 1

        self._guard(action=action, session=session)
        self._history.add(snapshot=ActionSnapshot(action=action, from_state=from_state), session=session)

        proposal: Any = self._create_proposal(action=protect(action))
        if inspect.isawaitable(proposal):
            proposal = await proposal

        if proposal is None:
            self._history.add(snapshot=NoProposalSnapshot(action=action), session=session)
            self._halt(session=session, reason=HaltReason.no_proposal, detail=f"action '{action.id}'")
            return None, None

        self._history.add(snapshot=ProposalSnapshot(proposal=proposal, action=action), session=session)

        # The current state may have changed while the proposal was pending.
        self._guard(action=action, session=session)

        old_model = protect(self._model) if self._history.enabled else None
        model = self._presenter(proposal=protect(proposal), model=protect(self._model))

        if model is None:
            self._history.add(snapshot=NoModelSnapshot(proposal=proposal, model=self._model), session=session)
            self._halt(session=session, reason=HaltReason.no_model, detail=f"proposal '{proposal.id}'")
            return None, None

        self._model = protect(model)
        if self._history.enabled:
            self._history.add(
                snapshot=MutationSnapshot(
                    old_model=old_model,
                    new_model=self._model,
                    diff=model_diff(old_model, self._model),
                ),
                session=session,
            )

        definition = match_state(definitions=self._definitions, model=self._model)
        if definition is None:
            self._history.add(snapshot=NoStateSnapshot(model=self._model), session=session)
            logger.warning(
                "session %s: model matches no state; engine stuck with last state '%s'",
                session.id,
                self._current.state.id,
            )
            session.mark_halted(HaltReason.no_state)
            return None, None

        self._current = definition
        self._history.add(snapshot=StateSnapshot(model=self._model, state=definition.state), session=session)
        logger.debug("session %s: state '%s'", session.id, definition.state.id)

        self._subscriptions.notify(model=self._model, state=definition.state)

        return self._derive_next_action(definition=definition), definition.state

    def _guard(self, *, action: SAMAction, session: Session) -> None:
        try:
            check_action(action=action, definition=self._current)
        except ActionBlockedError as e:
            self._history.add(
                snapshot=DisallowedActionSnapshot(action=action, state=self._current.state),
                session=session,
            )
            logger.info("session %s: %s", session.id, e)
            raise

    def _halt(self, *, session: Session, reason: HaltReason, detail: str) -> None:
        logger.info("session %s: halted (%s) on %s", session.id, reason.value, detail)
        session.mark_halted(reason)

    def _derive_next_action(self, *, definition: StateDefinition) -> SAMAction | None:
        if definition.next_action is None:
            return None
        return definition.next_action(model=protect(self._model))
