"""Translation of OpenStack runtime states reported by Waldur into host states."""

from typing import Optional

from .models import State

RUNNING_STATES = frozenset({"ACTIVE"})
STARTING_STATES = frozenset({"BUILDING", "HARD_REBOOT", "REBOOT", "REBUILD"})
STOPPED_STATES = frozenset({"DELETED", "SOFT_DELETED", "SHUTOFF", "STOPPED"})
ERROR_STATES = frozenset({"ERROR"})
PAUSED_STATES = frozenset({"PAUSED", "SUSPENDED"})


def translate_state(runtime_state: Optional[str]) -> State:
    """
    Maps a backend runtime state onto the abstract lifecycle state.

    Every input has an answer: an empty value, "UNKNOWN" and any state this
    table has never heard of all map to State.NONE.
    """
    if not runtime_state:
        return State.NONE
    if runtime_state in RUNNING_STATES:
        return State.RUNNING
    if runtime_state in STARTING_STATES:
        return State.STARTING
    if runtime_state in STOPPED_STATES:
        return State.STOPPED
    if runtime_state in ERROR_STATES:
        return State.ERROR
    if runtime_state in PAUSED_STATES:
        return State.PAUSED
    return State.NONE


def runtime_state_of(resource: Optional[dict]) -> str:
    """Extracts `backend_metadata.runtime_state` from a marketplace resource."""
    metadata = (resource or {}).get("backend_metadata") or {}
    return metadata.get("runtime_state") or ""
