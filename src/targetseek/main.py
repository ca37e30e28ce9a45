"""Entrypoint: run the controller against a MockRobot and the scripted demo feed."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys

from targetseek.config import ConfigError, load_config
from targetseek.controller.core import RobotCore
from targetseek.controller.loop import ControlLoop
from targetseek.controller.state_machine import ControlStateMachine
from targetseek.controller.states import STATE_LABELS, parse_state
from targetseek.io.mock_robot import MockRobot
from targetseek.io.scripted_feed import ScriptedFeed, demo_feed
from targetseek.perception.blob_extractor import ColorFileError, class_for, load_color_file
from targetseek.utils.event_logger import TransitionEventLogger
from targetseek.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    p = argparse.ArgumentParser(
        description="Target seeking controller: search, approach, avoid, arrive. Runs the scripted demo feed.",
    )
    p.add_argument("--target-color", type=str, default=None,
                   help="Target color signature to track: outdoor (default) or indoor")
    p.add_argument("--loop-hz", type=float, default=None, help="Control loop rate in Hz (default 10)")
    p.add_argument("--max-ticks", type=int, default=0, help="Stop after this many ticks (0 = no limit)")
    p.add_argument("--keep-running", action="store_true",
                   help="Keep ticking after arrival (default: exit once ARRIVED)")
    p.add_argument("--start-state", type=str, default="searching",
                   help="Initial control state (searching, approaching, avoiding, arrived)")
    p.add_argument("--color-file", type=str, default=None,
                   help="cmvision color file for the demo camera (default: built-in classes)")
    p.add_argument("--events-log", type=str, default=None,
                   help="Write transitions/maneuvers as JSONL to this path")
    p.add_argument("--env-file", type=str, default=None, help="Load TARGETSEEK_* settings from this .env file")
    p.add_argument("--log-level", type=str, default=None, help="Log level (default INFO)")
    p.add_argument("--log-file", type=str, default=None, help="Also append log output to this file")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the demo. Returns 0 on success, 2 on bad configuration."""
    args = parse_args(argv)
    try:
        config = load_config(
            env_file=args.env_file,
            target_color=args.target_color,
            loop_hz=args.loop_hz,
            log_level=args.log_level,
            log_file=args.log_file,
            events_log=args.events_log,
            color_file=args.color_file,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    setup_logging(config.log_level, config.log_file or None)

    try:
        classes = load_color_file(config.color_file or None)
        target_class = class_for(classes, config.target_signature)
    except (ColorFileError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    events = TransitionEventLogger(config.events_log) if config.events_log else None
    core = RobotCore(config)
    machine = ControlStateMachine(core, event_logger=events, initial_state=parse_state(args.start_state))
    robot = MockRobot()
    loop = ControlLoop(
        machine,
        robot,
        max_ticks=args.max_ticks,
        exit_on_arrival=not args.keep_running,
    )
    feed = ScriptedFeed(core.inbox, demo_feed(config, classes))

    def shutdown(signum, frame) -> None:
        loop.request_stop()

    previous = {sig: signal.signal(sig, shutdown) for sig in (signal.SIGINT, signal.SIGTERM)}

    logger.info(
        "Tracking %s target %s (color class %s)",
        config.target_color, config.target_signature, target_class.name,
    )
    feed.start()
    try:
        loop.run()
    finally:
        feed.stop()
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    logger.info("Final state: %s", STATE_LABELS[machine.state])
    logger.info("Status: %s", json.dumps(core.snapshot()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
