from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from samloop.core.definitions import SAMState
from samloop.core.errors import InvalidInitialModelError
from samloop.samples.counter import ChangeCount, make_counter


@dataclass(eq=False)
class _Recorder:
    calls: list[tuple[Any, str]] = field(default_factory=list)

    def __call__(self, *, model: Any, state: SAMState) -> None:
        self.calls.append((model, state.id))


async def test_counter_climbs_to_max_then_rejects_out_of_range() -> None:
    rec = _Recorder()
    sam = make_counter(subscriptions=[rec])

    # Construction notifies the initial subscriptions once.
    assert rec.calls == [({"count": 0}, "show-count")]

    for n in range(1, 11):
        await sam.execute(ChangeCount(count=n))

    assert sam.get_model() == {"count": 10}
    assert sam.get_state().id == "max-count"
    assert [s for _, s in rec.calls] == ["show-count"] * 10 + ["max-count"]

    await sam.execute(ChangeCount(count=11))

    assert sam.get_model() == {"count": 10}
    assert sam.get_state().id == "max-count"
    assert len(rec.calls) == 11


async def test_decrement_from_max_returns_to_show_count() -> None:
    sam = make_counter(count=10)
    assert sam.get_initial_state().id == "max-count"

    await sam.execute(ChangeCount(count=9))

    assert sam.get_model() == {"count": 9}
    assert sam.get_state().id == "show-count"


async def test_initial_model_and_state_survive_executes() -> None:
    sam = make_counter()

    await sam.execute(ChangeCount(count=3))
    await sam.execute(ChangeCount(count=10))

    assert sam.get_initial_model() == {"count": 0}
    assert sam.get_initial_state() == SAMState(id="show-count")

    leaked = sam.get_initial_model()
    leaked["count"] = 42
    assert sam.get_initial_model() == {"count": 0}


def test_model_outside_every_state_is_rejected_at_construction() -> None:
    with pytest.raises(InvalidInitialModelError) as e:
        make_counter(count=11)

    assert "evaluates to a state" in str(e.value)


async def test_subscribing_twice_notifies_once() -> None:
    rec = _Recorder()
    sam = make_counter()

    sam.subscribe(rec)
    sam.subscribe(rec)
    await sam.execute(ChangeCount(count=1))

    assert rec.calls == [({"count": 1}, "show-count")]

    sam.unsubscribe(rec)
    sam.unsubscribe(rec)
    await sam.execute(ChangeCount(count=2))

    assert len(rec.calls) == 1


async def test_subscribers_are_notified_in_registration_order() -> None:
    order: list[str] = []
    sam = make_counter(subscriptions=[lambda *, model, state: order.append("first")])
    sam.subscribe(lambda *, model, state: order.append("second"))
    order.clear()

    await sam.execute(ChangeCount(count=1))

    assert order == ["first", "second"]
