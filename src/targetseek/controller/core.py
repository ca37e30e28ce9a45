"""RobotCore: the single owner of perception and obstacle state.

Sensor producers only post into the inbox. The control tick calls drain(), which
applies pending events in arrival order through the three perception components.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from targetseek.config import ControllerConfig
from targetseek.perception.blob_aggregator import BlobAggregator
from targetseek.perception.contact_monitor import ContactMonitor
from targetseek.perception.depth_scanner import DepthScanner
from targetseek.perception.inbox import SensorEvent, SensorInbox, SensorKind
from targetseek.perception.types import GoalPerception, ObstacleState

logger = logging.getLogger(__name__)


class RobotCore:
    """Goal + obstacle state, the components that update them, and the inbox feeding them."""

    def __init__(
        self,
        config: ControllerConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._clock = clock
        self.goal = GoalPerception()
        self.obstacle = ObstacleState()
        self.inbox = SensorInbox(clock=clock)
        self.blob_aggregator = BlobAggregator(config)
        self.depth_scanner = DepthScanner(config)
        self.contact_monitor = ContactMonitor()
        self.last_depth_hits = 0
        self._last_event_at: dict[SensorKind, float | None] = {k: None for k in SensorKind}

    def drain(self) -> int:
        """Apply all pending inbox events. Returns the number applied."""
        events = self.inbox.drain()
        for event in events:
            self.apply(event)
        return len(events)

    def apply(self, event: SensorEvent) -> None:
        if event.kind is SensorKind.BLOBS:
            self.blob_aggregator.update(self.goal, event.payload)
        elif event.kind is SensorKind.DEPTH:
            self.last_depth_hits = self.depth_scanner.update(self.obstacle, event.payload)
        elif event.kind is SensorKind.CONTACT:
            self.contact_monitor.update(self.obstacle, event.payload)
        else:
            raise ValueError(f"unknown sensor kind: {event.kind!r}")
        self._last_event_at[event.kind] = event.received_at

    @property
    def arrival_reached(self) -> bool:
        return self.goal.goal_blob_area > self.config.arrival_area

    def sensor_ages(self) -> dict[str, float | None]:
        """Seconds since the last applied event per sensor kind (None = never)."""
        now = self._clock()
        return {
            k.value: (None if t is None else round(now - t, 3))
            for k, t in self._last_event_at.items()
        }

    def snapshot(self) -> dict[str, Any]:
        """Flat status dict for logging/telemetry."""
        return {
            "goal_found": self.goal.goal_found,
            "goal_centroid_x": round(self.goal.goal_centroid_x, 1),
            "goal_blob_area": self.goal.goal_blob_area,
            "obstacle_found": self.obstacle.obstacle_found,
            "bumper_latched": self.obstacle.bumper_latched,
            "depth_hits": self.last_depth_hits,
            "sensor_age_s": self.sensor_ages(),
        }
