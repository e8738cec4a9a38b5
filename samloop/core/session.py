from __future__ import annotations

from dataclasses import dataclass, field

from statemachine import State, StateMachine

from samloop.core.errors import HaltReason
from samloop.core.ids import generate_session_id


class SessionLifecycle(StateMachine):
    """Lifecycle of one SAM session.

    running -> completed (no next action derived)
    running -> halted (no proposal / no model / no state)
    running -> failed (blocked action or collaborator error)
    """

    running = State("running", value="running", initial=True)
    completed = State("completed", value="completed", final=True)
    halted = State("halted", value="halted", final=True)
    failed = State("failed", value="failed", final=True)

    finish = running.to(completed)
    halt = running.to(halted)
    fail = running.to(failed)


@dataclass(slots=True)
class Session:
    """Correlates one externally triggered action with every action it chains."""

    id: str = field(default_factory=generate_session_id)
    steps: int = 0
    halt_reason: HaltReason | None = None
    lifecycle: SessionLifecycle = field(default_factory=SessionLifecycle, repr=False)

    @property
    def status(self) -> str:
        return str(self.lifecycle.current_state.value)

    @property
    def is_open(self) -> bool:
        return self.lifecycle.current_state == self.lifecycle.running

    def mark_halted(self, reason: HaltReason) -> None:
        self.halt_reason = reason
        self.lifecycle.halt()
