"""Controller module - core state, motion primitives, state machine, control loop."""

from .core import RobotCore
from .motion import MotionIntent, VelocityCommand
from .state_machine import ControlStateMachine, TickResult
from .states import ControlState, STATE_LABELS, parse_state

__all__ = [
    "RobotCore",
    "MotionIntent",
    "VelocityCommand",
    "ControlStateMachine",
    "TickResult",
    "ControlState",
    "STATE_LABELS",
    "parse_state",
]
