"""Abstract velocity sink - Protocol for swappable adapters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class VelocitySink(Protocol):
    """Outbound side of the controller. Implementations: MockRobot, or a transport adapter."""

    def set_velocity(self, vx: float, wz: float) -> None:
        """Set linear (vx, m/s) and angular (wz, rad/s) velocity."""
        ...

    def stop(self) -> None:
        """Stop all motion."""
        ...
