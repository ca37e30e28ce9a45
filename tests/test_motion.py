"""Motion primitives and escape maneuver timing."""

from __future__ import annotations

import numpy as np
import pytest

from targetseek.config import ControllerConfig
from targetseek.controller.maneuver import EscapeManeuver, ManeuverStep, bumper_escape, forward_escape
from targetseek.controller.motion import (
    MotionIntent,
    VelocityCommand,
    advance,
    command_for,
    retreat,
    rotate,
    seek,
)
from targetseek.perception.types import GoalPerception


class TestPrimitives:
    def test_rotate(self, cfg):
        assert rotate(cfg) == VelocityCommand(0.0, 0.7)

    def test_advance_and_retreat(self, cfg):
        assert advance(cfg) == VelocityCommand(0.15, 0.0)
        assert retreat(cfg) == VelocityCommand(-0.15, 0.0)

    def test_seek_forward_speed(self, cfg):
        assert seek(0.0, cfg).linear == pytest.approx(0.105)

    def test_seek_small_offset_is_proportional(self, cfg):
        cmd = seek(0.5, cfg)
        assert cmd.angular == pytest.approx(-0.5 * 0.7 * 0.7)

    def test_seek_clamps_preserving_sign(self, cfg):
        assert seek(80.0, cfg).angular == pytest.approx(-0.3)
        assert seek(-80.0, cfg).angular == pytest.approx(0.3)

    def test_seek_never_exceeds_clamp(self, cfg):
        for x in np.linspace(-320.0, 320.0, 257):
            raw = -x * cfg.angular_speed * cfg.seek_gain
            angular = seek(float(x), cfg).angular
            assert abs(angular) <= cfg.angular_speed_thresh + 1e-12
            assert np.sign(angular) == np.sign(raw)

    def test_seek_uses_configured_clamp(self):
        cfg = ControllerConfig(angular_speed_thresh=0.1)
        assert seek(-100.0, cfg).angular == pytest.approx(0.1)

    @pytest.mark.parametrize("intent,expected", [
        (MotionIntent.ROTATE, VelocityCommand(0.0, 0.7)),
        (MotionIntent.ADVANCE, VelocityCommand(0.15, 0.0)),
        (MotionIntent.RETREAT, VelocityCommand(-0.15, 0.0)),
    ])
    def test_command_for(self, cfg, intent, expected):
        assert command_for(intent, GoalPerception(), cfg) == expected

    def test_command_for_seek_reads_goal(self, cfg):
        goal = GoalPerception(goal_found=True, goal_centroid_x=-0.2)
        assert command_for(MotionIntent.SEEK, goal, cfg) == seek(-0.2, cfg)


class TestManeuver:
    def test_bumper_escape_order(self, cfg):
        m = bumper_escape(cfg).start(10.0)
        assert m.intent_at(10.0) is MotionIntent.RETREAT
        assert m.intent_at(11.0) is MotionIntent.RETREAT
        assert m.intent_at(11.5) is MotionIntent.ROTATE
        assert m.intent_at(12.5) is MotionIntent.ADVANCE
        assert m.intent_at(13.7) is None
        assert m.done(13.7)
        assert not m.done(12.0)

    def test_forward_escape(self, cfg):
        m = forward_escape(cfg).start(0.0)
        assert m.total_s == pytest.approx(3.0)
        assert m.intent_at(2.9) is MotionIntent.ADVANCE
        assert m.intent_at(3.0) is None

    def test_time_before_start_counts_as_start(self):
        m = EscapeManeuver("x", (ManeuverStep(MotionIntent.ROTATE, 1.0),)).start(5.0)
        assert m.intent_at(4.0) is MotionIntent.ROTATE

    def test_zero_length_step_skipped(self):
        m = EscapeManeuver(
            "x",
            (ManeuverStep(MotionIntent.RETREAT, 0.0), ManeuverStep(MotionIntent.ADVANCE, 1.0)),
        ).start(0.0)
        assert m.intent_at(0.0) is MotionIntent.ADVANCE
