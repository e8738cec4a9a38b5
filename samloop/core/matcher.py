from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from samloop.core.definitions import StateDefinition, protect
from samloop.core.errors import StateConflictError


def match_state(*, definitions: Sequence[StateDefinition], model: Any) -> StateDefinition | None:
    """Return the first definition whose predicate holds, in declaration order.

    Predicate sets should be mutually exclusive; overlap is not verified here
    (see `find_state_conflicts`), the first match wins.
    """

    for definition in definitions:
        if definition.is_state(model=protect(model)):
            return definition
    return None


def matching_states(*, definitions: Sequence[StateDefinition], model: Any) -> list[StateDefinition]:
    return [d for d in definitions if d.is_state(model=protect(model))]


@dataclass(frozen=True, slots=True)
class StateConflict:
    model: Any
    state_ids: tuple[str, ...]

    @property
    def is_gap(self) -> bool:
        return not self.state_ids


def find_state_conflicts(*, definitions: Sequence[StateDefinition], models: Iterable[Any]) -> list[StateConflict]:
    """Check sample models against the no-gap/no-overlap property.

    Each model must satisfy exactly one predicate; offenders are reported with
    the ids of every state they matched (empty for a gap).
    """

    conflicts: list[StateConflict] = []
    for model in models:
        matched = matching_states(definitions=definitions, model=model)
        if len(matched) != 1:
            conflicts.append(StateConflict(model=protect(model), state_ids=tuple(d.state.id for d in matched)))
    return conflicts


def assert_exclusive_states(*, definitions: Sequence[StateDefinition], models: Iterable[Any]) -> None:
    conflicts = find_state_conflicts(definitions=definitions, models=models)
    if not conflicts:
        return

    lines: list[str] = []
    for c in conflicts:
        if c.is_gap:
            lines.append(f"- no state matches {c.model!r}")
        else:
            lines.append(f"- {c.model!r} matches {','.join(c.state_ids)}")
    raise StateConflictError("State definitions are not mutually exclusive:\n" + "\n".join(lines))
