from __future__ import annotations

import pytest

from samloop.config import debug_enabled, get_history_stream_name, get_redis_url
from samloop.engine import SAM
from samloop.history import HistoryEntry
from samloop.samples import counter


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("true", True), (" On ", True), ("0", False), ("", False)])
def test_debug_flag_parsing(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("SAM_DEBUG", raw)
    assert debug_enabled() is expected


def test_defaults_without_env() -> None:
    assert debug_enabled() is False
    assert get_history_stream_name() is None
    assert get_redis_url() == "redis://localhost:6379/0"


def test_blank_stream_name_counts_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SAM_HISTORY_STREAM", "   ")
    assert get_history_stream_name() is None


def test_engine_debug_defaults_to_env(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[HistoryEntry] = []

    class _Sink:
        def emit(self, entry: HistoryEntry) -> None:
            seen.append(entry)

    monkeypatch.setenv("SAM_DEBUG", "1")
    sam = SAM(
        model={"count": 0},
        create_proposal=counter.create_proposal,
        presenter=counter.present,
        state_definitions=counter.STATE_DEFINITIONS,
        history_sink=_Sink(),
    )

    assert [e.kind for e in sam.history] == ["constructor-model", "state"]
