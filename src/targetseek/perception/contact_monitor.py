"""Bumper contact: latches the bumper flag and forces obstacle_found on press."""

from __future__ import annotations

import logging

from .types import ObstacleState

logger = logging.getLogger(__name__)


class ContactMonitor:
    """Press sets bumper_latched and obstacle_found. Release only clears the latch;
    obstacle_found stays up until the next depth scan finds the way clear."""

    def update(self, obstacle: ObstacleState, pressed: bool) -> None:
        if pressed:
            if not obstacle.bumper_latched:
                logger.info("Bumper pressed")
            obstacle.bumper_latched = True
            obstacle.obstacle_found = True
        else:
            if obstacle.bumper_latched:
                logger.info("Bumper released")
            obstacle.bumper_latched = False
