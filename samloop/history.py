from __future__ import annotations

import asyncio
import inspect
import logging
import sys
import traceback
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from samloop.core.definitions import protect
from samloop.core.ids import generate_unique_id
from samloop.core.session import Session
from samloop.core.snapshots import SnapshotKind, StepSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One recorded loop step.

    `callstack` is captured when the entry is recorded but source lines are only
    read when it's rendered (`format_callstack`).
    """

    id: str
    snapshot: StepSnapshot
    session_id: str
    timestamp: datetime
    callstack: traceback.StackSummary

    @property
    def kind(self) -> SnapshotKind:
        return self.snapshot.kind

    @staticmethod
    def now(*, snapshot: StepSnapshot, session_id: str, callstack: traceback.StackSummary) -> "HistoryEntry":
        return HistoryEntry(
            id=generate_unique_id(),
            snapshot=snapshot,
            session_id=session_id,
            timestamp=datetime.now(tz=UTC),
            callstack=callstack,
        )

    def format_callstack(self) -> str:
        return "".join(self.callstack.format())


def capture_callstack(*, skip: int = 2) -> traceback.StackSummary:
    # skip=2: the first kept frame is whoever called HistoryRecorder.add.
    frame = sys._getframe(skip)
    stack = traceback.StackSummary.extract(traceback.walk_stack(frame), lookup_lines=False)
    stack.reverse()
    return stack


class HistorySink(Protocol):
    def emit(self, entry: HistoryEntry) -> Any:  # pragma: no cover
        ...


class OrderedPrinter:
    """Single-concurrency output queue.

    Entries reach the sink strictly in submission order even when the sink is
    asynchronous and slow. Entries submitted with no running event loop wait
    until the next submission from inside a loop, or until `flush()`.
    """

    def __init__(self, sink: HistorySink) -> None:
        self._sink = sink
        self._pending: deque[HistoryEntry] = deque()
        self._draining = False
        self._drain_task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, entry: HistoryEntry) -> None:
        self._pending.append(entry)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())

    async def _drain(self) -> None:
        if self._draining:
            return
        self._draining = True
        try:
            while self._pending:
                entry = self._pending.popleft()
                try:
                    result = self._sink.emit(entry)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    # Output problems must never reach the SAM loop.
                    logger.exception("history sink failed for entry %s (%s)", entry.id, entry.kind)
        finally:
            self._draining = False

    async def flush(self) -> None:
        while True:
            task = self._drain_task
            if task is not None and not task.done():
                await task
                continue
            if self._draining:
                await asyncio.sleep(0)
                continue
            if not self._pending:
                return
            await self._drain()


class HistoryRecorder:
    """Append-only debug log of SAM loop steps.

    Observational only: when disabled `add` is a no-op, and sink failures are
    logged rather than raised.
    """

    def __init__(self, *, enabled: bool, sink: HistorySink | None = None) -> None:
        self.enabled = enabled
        self._entries: list[HistoryEntry] = []
        self._printer = OrderedPrinter(sink) if (enabled and sink is not None) else None

    def add(self, *, snapshot: StepSnapshot, session: Session) -> None:
        if not self.enabled:
            return

        entry = HistoryEntry.now(
            snapshot=protect(snapshot),
            session_id=session.id,
            callstack=capture_callstack(),
        )
        self._entries.append(entry)

        if self._printer is not None:
            self._printer.submit(protect(entry))

    def get_stack(self) -> list[HistoryEntry]:
        # Entries are frozen but their payloads are not; callers get copies.
        return [protect(e) for e in self._entries]

    async def flush(self) -> None:
        if self._printer is not None:
            await self._printer.flush()
