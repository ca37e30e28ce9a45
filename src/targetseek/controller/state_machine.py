"""
Control state machine: SEARCHING -> APPROACHING -> AVOIDING -> ARRIVED.

Priority on every tick: contact > depth obstacle > goal. One handler per state returns
the next state and the motion intent; a tick that changes state emits no command.
Escape maneuvers run to completion without re-reading sensor state.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from targetseek.utils.event_logger import TransitionEventLogger

from .core import RobotCore
from .maneuver import EscapeManeuver, bumper_escape, forward_escape
from .motion import MotionIntent, VelocityCommand, command_for
from .states import ControlState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    """Handler output: where to go and what to emit."""

    next_state: ControlState
    intent: MotionIntent | None
    reason: str = ""


@dataclass(frozen=True)
class TickResult:
    """Outcome of one control tick."""

    state: ControlState
    intent: MotionIntent | None
    command: VelocityCommand | None
    reason: str = ""
    maneuver: str | None = None


@dataclass
class ControlContext:
    """Bookkeeping across ticks."""

    transition_log: list[dict[str, Any]] = field(default_factory=list)
    tick_count: int = 0
    state_entered_at: float = 0.0
    last_intent: MotionIntent | None = None
    last_reason: str = ""
    maneuvers_run: int = 0


class ControlStateMachine:
    """
    Reactive controller. The control loop calls tick() at a fixed rate (10 Hz by default).
    """

    def __init__(
        self,
        core: RobotCore,
        event_logger: TransitionEventLogger | None = None,
        initial_state: ControlState = ControlState.SEARCHING,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.core = core
        self.cfg = core.config
        self._events = event_logger
        self._clock = clock
        self.state = initial_state
        self.maneuver: EscapeManeuver | None = None
        self.ctx = ControlContext(state_entered_at=clock())
        self._handlers: dict[ControlState, Callable[[float], Step]] = {
            ControlState.SEARCHING: self._tick_searching,
            ControlState.APPROACHING: self._tick_approaching,
            ControlState.AVOIDING: self._tick_avoiding,
            ControlState.ARRIVED: self._tick_arrived,
        }
        missing = set(ControlState) - set(self._handlers)
        assert not missing, f"no handler for {missing}"

    @property
    def arrived(self) -> bool:
        return self.state is ControlState.ARRIVED

    def tick(self, current_time: float | None = None) -> TickResult:
        """One tick: apply pending sensor events, run the state handler, build the command."""
        t = current_time if current_time is not None else self._clock()
        self.ctx.tick_count += 1
        self.core.drain()

        goal, obstacle = self.core.goal, self.core.obstacle
        logger.debug(
            "state: %s obstacle found: %s bumper: %s goal found: %s area: %d",
            self.state.value,
            obstacle.obstacle_found,
            obstacle.bumper_latched,
            goal.goal_found,
            goal.goal_blob_area,
        )

        maneuver_name = self.maneuver.name if self.maneuver is not None else None
        if self.maneuver is not None:
            step = self._tick_maneuver(t)
        else:
            step = self._handlers[self.state](t)
            if self.maneuver is not None:
                maneuver_name = self.maneuver.name

        if step.next_state is not self.state:
            self._transition_to(step.next_state, t, step.reason)

        command = command_for(step.intent, goal, self.cfg) if step.intent is not None else None
        self.ctx.last_intent = step.intent
        self.ctx.last_reason = step.reason
        return TickResult(
            state=self.state,
            intent=step.intent,
            command=command,
            reason=step.reason,
            maneuver=maneuver_name,
        )

    def _transition_to(self, new_state: ControlState, t: float, reason: str = "") -> None:
        self.ctx.transition_log.append({
            "state": self.state.value,
            "next": new_state.value,
            "reason": reason,
            "t": t,
        })
        logger.info("%s -> %s (%s)", self.state.value, new_state.value, reason)
        if self._events is not None:
            self._events.log_state_transition(self.state.value, new_state.value, reason, t)
            if new_state is ControlState.ARRIVED:
                self._events.log_arrived(self.core.goal.goal_blob_area, t)
        self.state = new_state
        self.ctx.state_entered_at = t

    def _tick_searching(self, t: float) -> Step:
        if self.core.obstacle.obstacle_found:
            return Step(ControlState.AVOIDING, None, "obstacle_found")
        if self.core.goal.goal_found:
            return Step(ControlState.APPROACHING, None, "goal_found")
        return Step(ControlState.SEARCHING, MotionIntent.ROTATE, "searching")

    def _tick_approaching(self, t: float) -> Step:
        if self.core.obstacle.obstacle_found:
            return Step(ControlState.AVOIDING, None, "obstacle_found")
        if not self.core.goal.goal_found:
            return Step(ControlState.SEARCHING, None, "goal_lost")
        return Step(ControlState.APPROACHING, MotionIntent.SEEK, "seeking")

    def _tick_avoiding(self, t: float) -> Step:
        # The obstacle in front is the target itself once it fills enough of the frame
        if self.core.arrival_reached:
            return Step(ControlState.ARRIVED, None, "goal_fills_frame")
        if self.core.obstacle.bumper_latched:
            return self._start_maneuver(bumper_escape(self.cfg), t)
        if self.core.obstacle.obstacle_found:
            return Step(ControlState.AVOIDING, MotionIntent.ROTATE, "depth_obstacle")
        return self._start_maneuver(forward_escape(self.cfg), t)

    def _tick_arrived(self, t: float) -> Step:
        return Step(ControlState.ARRIVED, None, "arrived")

    def _start_maneuver(self, maneuver: EscapeManeuver, t: float) -> Step:
        self.maneuver = maneuver.start(t)
        self.ctx.maneuvers_run += 1
        logger.info("Starting %s (%.1fs)", maneuver.name, maneuver.total_s)
        if self._events is not None:
            self._events.log_maneuver_start(maneuver.name, maneuver.total_s, t)
        return self._tick_maneuver(t)

    def _tick_maneuver(self, t: float) -> Step:
        m = self.maneuver
        assert m is not None
        intent = m.intent_at(t)
        if intent is not None:
            return Step(self.state, intent, m.name)
        self.maneuver = None
        logger.info("Finished %s", m.name)
        if self._events is not None:
            self._events.log_maneuver_done(m.name, t)
        return Step(ControlState.SEARCHING, None, f"{m.name}_done")
