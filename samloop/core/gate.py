from __future__ import annotations

from samloop.core.definitions import RestrictionType, SAMIdentity, StateDefinition
from samloop.core.errors import ActionBlockedError


def is_action_disallowed(*, action: SAMIdentity, definition: StateDefinition) -> bool:
    """Evaluate the active state's restriction policy against an action id.

    - `disallow`: blocked iff the id is listed.
    - `strictly-allow`: blocked unless the id is listed.
    - no policy: always admissible.
    """

    restrictions = definition.restrictions
    if restrictions is None:
        return False

    if restrictions.type == RestrictionType.disallow:
        return action.id in restrictions.actions
    if restrictions.type == RestrictionType.strictly_allow:
        return action.id not in restrictions.actions

    raise ValueError(f"Unknown restriction type: {restrictions.type}")


def check_action(*, action: SAMIdentity, definition: StateDefinition) -> None:
    if is_action_disallowed(action=action, definition=definition):
        raise ActionBlockedError(action_id=action.id, state_id=definition.state.id)
