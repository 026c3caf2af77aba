"""The fixed set of loggable actions and what each is worth."""

from __future__ import annotations

from enum import Enum


class ActionType(Enum):
    DM = "dm"            # send a cold DM
    LOOM = "loom"        # record a Loom video
    CALL = "call"        # book a call
    CLIENT = "client"    # close a client
    CONTENT = "content"  # publish a piece of content
    SYSTEM = "system"    # build a system / automation


ACTION_XP_VALUES: dict[str, int] = {
    ActionType.DM.value: 5,
    ActionType.LOOM.value: 20,
    ActionType.CALL.value: 30,
    ActionType.CLIENT.value: 50,
    ActionType.CONTENT.value: 15,
    ActionType.SYSTEM.value: 45,
}


def xp_value_for(action_type: str) -> int | None:
    """Fixed XP for *action_type*, or ``None`` if it is not a known action."""
    return ACTION_XP_VALUES.get(action_type)
