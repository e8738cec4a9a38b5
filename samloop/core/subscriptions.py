from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from samloop.core.definitions import SAMState, Subscription, protect


class SubscriptionRegistry:
    """Ordered observers, keyed by reference identity.

    Registering the same callable twice is a no-op, as is removing one that
    was never registered. Each subscriber gets its own copy of the model and
    state so subscribers can't alias each other or the engine.
    """

    def __init__(self, subscriptions: Iterable[Subscription] = ()) -> None:
        self._subscriptions: list[Subscription] = []
        for s in subscriptions:
            self.add(s)

    def add(self, subscription: Subscription) -> None:
        if any(s is subscription for s in self._subscriptions):
            return
        self._subscriptions.append(subscription)

    def remove(self, subscription: Subscription) -> None:
        for idx, s in enumerate(self._subscriptions):
            if s is subscription:
                del self._subscriptions[idx]
                return

    def notify(self, *, model: Any, state: SAMState) -> None:
        # Snapshot so subscribers may (un)subscribe while being notified.
        for s in tuple(self._subscriptions):
            s(model=protect(model), state=protect(state))
