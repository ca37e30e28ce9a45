"""Perception types - BlobDetection, GoalPerception, ObstacleState."""

from __future__ import annotations

from dataclasses import dataclass

from targetseek.config import ColorSignature


@dataclass(frozen=True)
class BlobDetection:
    """Single color blob from one camera frame."""

    red: int
    green: int
    blue: int
    x: float  # centroid column, pixels
    y: float  # centroid row, pixels
    area: int  # pixels

    @property
    def color(self) -> ColorSignature:
        return (self.red, self.green, self.blue)


@dataclass
class GoalPerception:
    """Target perception state. Written only by BlobAggregator.

    goal_centroid_x / goal_centroid_y are only meaningful while goal_found is True;
    they keep their last value otherwise.
    """

    goal_found: bool = False
    goal_centroid_x: float = 0.0  # signed offset from image center, pixels
    goal_centroid_y: float = 0.0  # row, pixels
    goal_blob_area: int = 0
    goal_blob_count: int = 0


@dataclass
class ObstacleState:
    """Obstacle flags. bumper_latched implies obstacle_found."""

    obstacle_found: bool = False
    bumper_latched: bool = False
