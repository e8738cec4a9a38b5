from __future__ import annotations

import pytest

from samloop.core.definitions import ActionRestrictions, RestrictionType, SAMAction, SAMState, StateDefinition
from samloop.core.errors import ActionBlockedError
from samloop.core.gate import check_action, is_action_disallowed


def _state(restrictions: ActionRestrictions | None) -> StateDefinition:
    return StateDefinition(state=SAMState(id="s1"), is_state=lambda *, model: True, restrictions=restrictions)


def test_unrestricted_state_admits_everything() -> None:
    assert not is_action_disallowed(action=SAMAction(id="anything"), definition=_state(None))


def test_disallow_blocks_only_listed_ids() -> None:
    definition = _state(ActionRestrictions.disallow("decrement-count"))

    assert is_action_disallowed(action=SAMAction(id="decrement-count"), definition=definition)
    assert not is_action_disallowed(action=SAMAction(id="reset-countdown"), definition=definition)


def test_strictly_allow_blocks_everything_not_listed() -> None:
    definition = _state(ActionRestrictions.strictly_allow(SAMAction(id="start-countdown")))

    assert definition.restrictions is not None
    assert definition.restrictions.type == RestrictionType.strictly_allow
    assert definition.restrictions.actions == frozenset({"start-countdown"})
    assert not is_action_disallowed(action=SAMAction(id="start-countdown"), definition=definition)
    assert is_action_disallowed(action=SAMAction(id="decrement-count"), definition=definition)


def test_strictly_allow_with_empty_list_blocks_all() -> None:
    definition = _state(ActionRestrictions.strictly_allow())
    assert is_action_disallowed(action=SAMAction(id="start-countdown"), definition=definition)


def test_check_action_raises_with_action_and_state_ids() -> None:
    definition = _state(ActionRestrictions.disallow("launch"))

    with pytest.raises(ActionBlockedError) as e:
        check_action(action=SAMAction(id="launch"), definition=definition)

    assert e.value.action_id == "launch"
    assert e.value.state_id == "s1"
    assert str(e.value) == "Action 'launch' blocked in state 's1'"


def test_check_action_passes_admissible_action() -> None:
    check_action(action=SAMAction(id="other"), definition=_state(ActionRestrictions.disallow("launch")))
