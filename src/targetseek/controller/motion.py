"""Motion primitives: pure mappings from a motion intent to a velocity command."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from targetseek.config import ControllerConfig
from targetseek.perception.types import GoalPerception


class MotionIntent(Enum):
    ROTATE = "rotate"
    SEEK = "seek"
    ADVANCE = "advance"
    RETREAT = "retreat"


@dataclass(frozen=True)
class VelocityCommand:
    """Planar velocity: forward speed (m/s) and yaw rate (rad/s, positive = left)."""

    linear: float
    angular: float


def rotate(cfg: ControllerConfig) -> VelocityCommand:
    return VelocityCommand(0.0, cfg.angular_speed)


def seek(goal_centroid_x: float, cfg: ControllerConfig) -> VelocityCommand:
    """P-control on the centroid offset; yaw rate rescaled to +/-angular_speed_thresh if larger."""
    angular = -goal_centroid_x * cfg.angular_speed * cfg.seek_gain
    if abs(angular) > cfg.angular_speed_thresh:
        angular = angular * cfg.angular_speed_thresh / abs(angular)
    return VelocityCommand(cfg.linear_speed * cfg.seek_speed_factor, angular)


def advance(cfg: ControllerConfig) -> VelocityCommand:
    return VelocityCommand(cfg.linear_speed, 0.0)


def retreat(cfg: ControllerConfig) -> VelocityCommand:
    return VelocityCommand(-cfg.linear_speed, 0.0)


def command_for(intent: MotionIntent, goal: GoalPerception, cfg: ControllerConfig) -> VelocityCommand:
    """Velocity command for intent. Only SEEK reads the goal."""
    if intent is MotionIntent.ROTATE:
        return rotate(cfg)
    if intent is MotionIntent.SEEK:
        return seek(goal.goal_centroid_x, cfg)
    if intent is MotionIntent.ADVANCE:
        return advance(cfg)
    if intent is MotionIntent.RETREAT:
        return retreat(cfg)
    raise ValueError(f"unknown motion intent: {intent!r}")
