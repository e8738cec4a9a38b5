from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import cast

import redis

from samloop.config import get_history_stream_name, get_redis_url
from samloop.diffing import to_jsonable
from samloop.history import HistoryEntry, HistorySink

logger = logging.getLogger(__name__)


def _snapshot_payload(entry: HistoryEntry) -> dict[str, object]:
    payload = {f.name: getattr(entry.snapshot, f.name) for f in dataclasses.fields(entry.snapshot)}
    payload.pop("kind", None)
    return cast(dict[str, object], to_jsonable(payload))


class LoggingHistorySink:
    """Render history entries through `logging` at DEBUG."""

    def __init__(self, *, log: logging.Logger | None = None, include_callstack: bool = False) -> None:
        self._log = log or logger
        self.include_callstack = include_callstack

    def emit(self, entry: HistoryEntry) -> None:
        payload = _snapshot_payload(entry)
        diff = payload.pop("diff", "")

        self._log.debug(
            "[sam %s] #%s %s %s",
            entry.session_id,
            entry.id,
            entry.kind,
            json.dumps(payload, sort_keys=True),
        )
        if diff:
            self._log.debug("[sam %s] #%s diff:\n%s", entry.session_id, entry.id, diff)
        if self.include_callstack:
            self._log.debug("[sam %s] #%s callstack:\n%s", entry.session_id, entry.id, entry.format_callstack())


@dataclass(frozen=True, slots=True)
class HistoryStream:
    name: str

    @property
    def key(self) -> str:
        return f"sam:history:{self.name}"


def entry_fields(entry: HistoryEntry) -> dict[str, str]:
    """Flatten an entry to the str->str mapping Redis streams expect."""

    return {
        "id": entry.id,
        "kind": entry.kind,
        "session_id": entry.session_id,
        "ts": entry.timestamp.isoformat(),
        "snapshot": json.dumps(_snapshot_payload(entry), sort_keys=True),
    }


class RedisStreamHistorySink:
    """Append history entries to a Redis stream, one stream entry per loop step."""

    def __init__(self, *, r: redis.Redis, stream: HistoryStream) -> None:
        self._r = r
        self.stream = stream

    def emit(self, entry: HistoryEntry) -> str:
        stream_id = self._r.xadd(self.stream.key, entry_fields(entry))
        return cast(str, stream_id)


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


def default_history_sink() -> HistorySink:
    name = get_history_stream_name()
    if name is None:
        return LoggingHistorySink()

    return RedisStreamHistorySink(r=create_redis(), stream=HistoryStream(name=name))
