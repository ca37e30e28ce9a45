"""Control states. Transitions happen only on the control tick."""

from __future__ import annotations

from enum import Enum


class ControlState(Enum):
    # Rotate in place until the target or an obstacle shows up
    SEARCHING = "searching"

    # Steer toward the target centroid while driving forward
    APPROACHING = "approaching"

    # Obstacle flagged: arrive if it is the target, else rotate away or run an escape maneuver
    AVOIDING = "avoiding"

    # Terminal
    ARRIVED = "arrived"


STATE_LABELS: dict[ControlState, str] = {
    ControlState.SEARCHING: "Searching for target",
    ControlState.APPROACHING: "Approaching target",
    ControlState.AVOIDING: "Avoiding obstacle",
    ControlState.ARRIVED: "Arrived at target",
}


def parse_state(value: str | ControlState) -> ControlState:
    """Parse a state name or value (case-insensitive). Default SEARCHING."""
    if isinstance(value, ControlState):
        return value
    s = (value or "").strip().lower()
    for st in ControlState:
        if st.value == s:
            return st
    return ControlState.SEARCHING
