"""Mock robot: records velocity commands instead of driving motors."""

from __future__ import annotations

import logging
import threading

from .robot_interface import VelocitySink

logger = logging.getLogger(__name__)


class MockRobot(VelocitySink):
    """Deterministic sink for testing and the demo CLI."""

    def __init__(self, *, max_history: int = 10000) -> None:
        self._lock = threading.Lock()
        self._max_history = max_history
        self.commands: list[tuple[float, float]] = []
        self.stop_count = 0

    def set_velocity(self, vx: float, wz: float) -> None:
        """Log and record velocity command."""
        logger.debug("set_velocity(vx=%.2f, wz=%.2f)", vx, wz)
        with self._lock:
            self.commands.append((vx, wz))
            if len(self.commands) > self._max_history:
                del self.commands[:-self._max_history]

    def stop(self) -> None:
        """Log stop."""
        logger.debug("stop()")
        with self._lock:
            self.stop_count += 1
            self.commands.append((0.0, 0.0))

    @property
    def last_command(self) -> tuple[float, float] | None:
        with self._lock:
            return self.commands[-1] if self.commands else None
