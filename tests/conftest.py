"""Shared fixtures: default config, robot core on a fake clock."""

from __future__ import annotations

import pytest

from targetseek.config import ControllerConfig
from targetseek.controller.core import RobotCore
from targetseek.controller.state_machine import ControlStateMachine


class FakeClock:
    """Monotonic clock advanced by hand (or by the control loop's sleep)."""

    def __init__(self, t: float = 0.0) -> None:
        self.t = t

    def __call__(self) -> float:
        return self.t

    def sleep(self, dt: float) -> None:
        self.t += dt


@pytest.fixture
def cfg() -> ControllerConfig:
    return ControllerConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def core(cfg, clock) -> RobotCore:
    return RobotCore(cfg, clock=clock)


@pytest.fixture
def machine(core, clock) -> ControlStateMachine:
    return ControlStateMachine(core, clock=clock)
