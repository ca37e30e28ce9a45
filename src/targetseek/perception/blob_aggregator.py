"""Blob aggregation: weighted centroid and total area of the target-colored blobs in a frame.

goal_found is recomputed from scratch on every non-empty frame. An empty frame
carries no information and leaves the whole GoalPerception untouched, including
goal_blob_area, so the arrival check keeps seeing the last non-empty frame's area.
"""

from __future__ import annotations

import logging
from typing import Iterable

from targetseek.config import ColorSignature, ControllerConfig

from .types import BlobDetection, GoalPerception

logger = logging.getLogger(__name__)


class BlobAggregator:
    """Filters blobs by the active target signature and updates GoalPerception in place."""

    def __init__(self, config: ControllerConfig) -> None:
        self._signature: ColorSignature = config.target_signature
        self._area_threshold = config.goal_area_threshold
        self._half_width = config.image_width / 2

    @property
    def signature(self) -> ColorSignature:
        return self._signature

    def update(self, goal: GoalPerception, blobs: Iterable[BlobDetection]) -> None:
        frame = list(blobs)
        if not frame:
            return

        sum_x = 0.0
        sum_y = 0.0
        total_area = 0
        count = 0
        for blob in frame:
            if blob.color != self._signature:
                continue
            sum_x += blob.area * blob.x
            sum_y += blob.area * blob.y
            total_area += blob.area
            count += 1

        goal.goal_blob_area = total_area
        goal.goal_blob_count = count
        if total_area > self._area_threshold:
            goal.goal_centroid_x = sum_x / total_area - self._half_width
            goal.goal_centroid_y = sum_y / total_area
            if not goal.goal_found:
                logger.debug("Goal acquired: area=%d offset=%.1f", total_area, goal.goal_centroid_x)
            goal.goal_found = True
        else:
            if goal.goal_found:
                logger.debug("Goal lost: area=%d", total_area)
            goal.goal_found = False
