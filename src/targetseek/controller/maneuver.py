"""Escape maneuvers: fixed sequences of motion intents, each held for a time budget.

A maneuver is uninterruptible. While it runs the controller emits its current intent
every tick and does not look at sensor state; it ends on the first tick at or after
its total duration.
"""

from __future__ import annotations

from dataclasses import dataclass

from targetseek.config import ControllerConfig

from .motion import MotionIntent


@dataclass(frozen=True)
class ManeuverStep:
    intent: MotionIntent
    duration_s: float


@dataclass
class EscapeManeuver:
    name: str
    steps: tuple[ManeuverStep, ...]
    started_at: float = 0.0

    @property
    def total_s(self) -> float:
        return sum(s.duration_s for s in self.steps)

    def start(self, t: float) -> "EscapeManeuver":
        self.started_at = t
        return self

    def done(self, t: float) -> bool:
        return t - self.started_at >= self.total_s

    def intent_at(self, t: float) -> MotionIntent | None:
        """Intent for time t, or None once the maneuver is over."""
        elapsed = t - self.started_at
        if elapsed < 0:
            elapsed = 0.0
        for step in self.steps:
            if elapsed < step.duration_s:
                return step.intent
            elapsed -= step.duration_s
        return None


def bumper_escape(cfg: ControllerConfig) -> EscapeManeuver:
    """Back off, turn, then drive on: used after a bumper contact."""
    return EscapeManeuver(
        name="bumper_escape",
        steps=(
            ManeuverStep(MotionIntent.RETREAT, cfg.escape_retreat_s),
            ManeuverStep(MotionIntent.ROTATE, cfg.escape_rotate_s),
            ManeuverStep(MotionIntent.ADVANCE, cfg.escape_advance_s),
        ),
    )


def forward_escape(cfg: ControllerConfig) -> EscapeManeuver:
    """Drive forward once the depth obstacle has cleared from view."""
    return EscapeManeuver(
        name="forward_escape",
        steps=(ManeuverStep(MotionIntent.ADVANCE, cfg.forward_escape_s),),
    )
