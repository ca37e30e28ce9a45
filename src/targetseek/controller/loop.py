"""Fixed-rate control loop: tick the state machine, forward commands to the velocity sink."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from targetseek.io.robot_interface import VelocitySink

from .state_machine import ControlStateMachine, TickResult
from .states import ControlState

logger = logging.getLogger(__name__)


class ControlLoop:
    """
    Runs ControlStateMachine.tick() every 1/loop_hz seconds on a monotonic schedule.
    request_stop() may be called from any thread; the sink is stopped on exit.
    """

    def __init__(
        self,
        machine: ControlStateMachine,
        sink: VelocitySink,
        *,
        loop_hz: float | None = None,
        max_ticks: int = 0,
        exit_on_arrival: bool = False,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], object] | None = None,
    ) -> None:
        self.machine = machine
        self.sink = sink
        self.loop_hz = loop_hz if loop_hz is not None else machine.cfg.loop_hz
        self.max_ticks = max_ticks
        self.exit_on_arrival = exit_on_arrival
        self._clock = clock
        self._stop = threading.Event()
        self._sleep = sleep if sleep is not None else self._stop.wait
        self.ticks = 0
        self.commands_sent = 0
        self.last_result: TickResult | None = None

    def request_stop(self) -> None:
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def step(self) -> TickResult:
        """Run one tick and publish its command, if any."""
        result = self.machine.tick(self._clock())
        if result.command is not None:
            self.sink.set_velocity(result.command.linear, result.command.angular)
            self.commands_sent += 1
        self.ticks += 1
        self.last_result = result
        return result

    def run(self) -> int:
        """Tick until stopped, max_ticks reached, or (optionally) arrival. Returns ticks run."""
        period = 1.0 / self.loop_hz
        next_at = self._clock()
        logger.info("Control loop started at %.1f Hz", self.loop_hz)
        try:
            while not self._stop.is_set():
                result = self.step()
                if self.max_ticks > 0 and self.ticks >= self.max_ticks:
                    break
                if self.exit_on_arrival and result.state is ControlState.ARRIVED:
                    logger.info("Arrived after %d ticks", self.ticks)
                    break
                next_at += period
                delay = next_at - self._clock()
                if delay > 0:
                    self._sleep(delay)
                else:
                    # Overran (e.g. slow sink); resync instead of bursting to catch up
                    next_at = self._clock()
        finally:
            self.sink.stop()
            logger.info(
                "Control loop stopped: ticks=%d commands=%d state=%s",
                self.ticks,
                self.commands_sent,
                self.machine.state.value,
            )
        return self.ticks
