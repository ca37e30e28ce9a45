"""I/O module - velocity sink interface and adapters."""

from .robot_interface import VelocitySink
from .mock_robot import MockRobot

__all__ = ["VelocitySink", "MockRobot"]
