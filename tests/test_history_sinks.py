from __future__ import annotations

import json
import logging

import fakeredis
import pytest

import samloop.sinks as sinks
from samloop.samples.counter import ChangeCount, make_counter
from samloop.sinks import (
    HistoryStream,
    LoggingHistorySink,
    RedisStreamHistorySink,
    default_history_sink,
)


def test_history_stream_key() -> None:
    assert HistoryStream(name="counter").key == "sam:history:counter"


async def test_redis_sink_appends_one_stream_entry_per_step() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    sink = RedisStreamHistorySink(r=r, stream=HistoryStream(name="counter"))
    sam = make_counter(debug=True, history_sink=sink)

    await sam.execute(ChangeCount(count=1))
    await sam.flush_history()

    entries = r.xrange("sam:history:counter")
    kinds = [fields["kind"] for _, fields in entries]
    assert kinds == ["constructor-model", "state", "action", "proposal", "mutation", "state"]

    _, mutation = entries[4]
    payload = json.loads(mutation["snapshot"])
    assert payload["old_model"] == {"count": 0}
    assert payload["new_model"] == {"count": 1}
    assert mutation["session_id"] == sam.history[4].session_id

    _, action = entries[2]
    assert json.loads(action["snapshot"])["action"] == {"id": "change-count-action", "count": 1}


async def test_logging_sink_writes_entries_and_diffs(caplog: pytest.LogCaptureFixture) -> None:
    sam = make_counter(debug=True, history_sink=LoggingHistorySink())

    with caplog.at_level(logging.DEBUG, logger="samloop.sinks"):
        await sam.execute(ChangeCount(count=2))
        await sam.flush_history()

    assert "constructor-model" in caplog.text
    assert "mutation" in caplog.text
    assert '+  "count": 2' in caplog.text


async def test_logging_sink_can_include_callstacks(caplog: pytest.LogCaptureFixture) -> None:
    sam = make_counter(debug=True, history_sink=LoggingHistorySink(include_callstack=True))

    with caplog.at_level(logging.DEBUG, logger="samloop.sinks"):
        await sam.flush_history()

    assert "callstack:" in caplog.text


def test_default_sink_logs_when_no_stream_configured() -> None:
    assert isinstance(default_history_sink(), LoggingHistorySink)


def test_default_sink_uses_redis_stream_when_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setenv("SAM_HISTORY_STREAM", "launcher")
    monkeypatch.setattr(sinks, "create_redis", lambda: r)

    sink = default_history_sink()

    assert isinstance(sink, RedisStreamHistorySink)
    assert sink.stream.key == "sam:history:launcher"
