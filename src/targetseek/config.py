"""Controller configuration - dataclass, env vars, and CLI overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

ColorSignature = Tuple[int, int, int]  # (red, green, blue)

# Signatures as reported by cmvision for the pink target (colors.txt calibration)
INDOOR_PINK: ColorSignature = (238, 114, 76)
OUTDOOR_PINK: ColorSignature = (185, 66, 36)


def _default_target_colors() -> dict[str, ColorSignature]:
    return {"indoor": INDOOR_PINK, "outdoor": OUTDOOR_PINK}


class ConfigError(ValueError):
    """Invalid controller configuration."""


def _env(key: str, default: str) -> str:
    """Read env var with default."""
    return os.environ.get(key, default)


def load_config(
    *,
    env_file: str | Path | None = None,
    target_color: str | None = None,
    goal_area_threshold: float | None = None,
    near_range_m: float | None = None,
    near_point_threshold: int | None = None,
    scan_row_offset: int | None = None,
    scan_rows: int | None = None,
    image_width: int | None = None,
    image_height: int | None = None,
    linear_speed: float | None = None,
    angular_speed: float | None = None,
    angular_speed_thresh: float | None = None,
    seek_gain: float | None = None,
    seek_speed_factor: float | None = None,
    arrival_area_fraction: float | None = None,
    loop_hz: float | None = None,
    escape_retreat_s: float | None = None,
    escape_rotate_s: float | None = None,
    escape_advance_s: float | None = None,
    forward_escape_s: float | None = None,
    log_level: str | None = None,
    log_file: str | None = None,
    color_file: str | None = None,
    events_log: str | None = None,
) -> ControllerConfig:
    """Load config. Explicit arguments override TARGETSEEK_* env vars (optionally from a .env file)."""
    if env_file is not None:
        load_dotenv(env_file)

    def _str(k: str, d: str, override: str | None) -> str:
        return override if override is not None else _env(k, d)

    def _int(k: str, d: int, override: int | None) -> int:
        if override is not None:
            return override
        raw = _env(k, str(d))
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{k} must be an integer, got {raw!r}") from None

    def _float(k: str, d: float, override: float | None) -> float:
        if override is not None:
            return override
        raw = _env(k, str(d))
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(f"{k} must be a number, got {raw!r}") from None

    d = ControllerConfig()
    cfg = ControllerConfig(
        target_color=_str("TARGETSEEK_TARGET_COLOR", d.target_color, target_color).strip().lower(),
        goal_area_threshold=_float("TARGETSEEK_GOAL_AREA_THRESHOLD", d.goal_area_threshold, goal_area_threshold),
        near_range_m=_float("TARGETSEEK_NEAR_RANGE_M", d.near_range_m, near_range_m),
        near_point_threshold=_int("TARGETSEEK_NEAR_POINT_THRESHOLD", d.near_point_threshold, near_point_threshold),
        scan_row_offset=_int("TARGETSEEK_SCAN_ROW_OFFSET", d.scan_row_offset, scan_row_offset),
        scan_rows=_int("TARGETSEEK_SCAN_ROWS", d.scan_rows, scan_rows),
        image_width=_int("TARGETSEEK_IMAGE_WIDTH", d.image_width, image_width),
        image_height=_int("TARGETSEEK_IMAGE_HEIGHT", d.image_height, image_height),
        linear_speed=_float("TARGETSEEK_LINEAR_SPEED", d.linear_speed, linear_speed),
        angular_speed=_float("TARGETSEEK_ANGULAR_SPEED", d.angular_speed, angular_speed),
        angular_speed_thresh=_float("TARGETSEEK_ANGULAR_SPEED_THRESH", d.angular_speed_thresh, angular_speed_thresh),
        seek_gain=_float("TARGETSEEK_SEEK_GAIN", d.seek_gain, seek_gain),
        seek_speed_factor=_float("TARGETSEEK_SEEK_SPEED_FACTOR", d.seek_speed_factor, seek_speed_factor),
        arrival_area_fraction=_float("TARGETSEEK_ARRIVAL_AREA_FRACTION", d.arrival_area_fraction, arrival_area_fraction),
        loop_hz=_float("TARGETSEEK_LOOP_HZ", d.loop_hz, loop_hz),
        escape_retreat_s=_float("TARGETSEEK_ESCAPE_RETREAT_S", d.escape_retreat_s, escape_retreat_s),
        escape_rotate_s=_float("TARGETSEEK_ESCAPE_ROTATE_S", d.escape_rotate_s, escape_rotate_s),
        escape_advance_s=_float("TARGETSEEK_ESCAPE_ADVANCE_S", d.escape_advance_s, escape_advance_s),
        forward_escape_s=_float("TARGETSEEK_FORWARD_ESCAPE_S", d.forward_escape_s, forward_escape_s),
        log_level=_str("TARGETSEEK_LOG_LEVEL", d.log_level, log_level),
        log_file=_str("TARGETSEEK_LOG_FILE", d.log_file, log_file),
        color_file=_str("TARGETSEEK_COLOR_FILE", d.color_file, color_file),
        events_log=_str("TARGETSEEK_EVENTS_LOG", d.events_log, events_log),
    )
    cfg.validate()
    return cfg


@dataclass(frozen=True)
class ControllerConfig:
    """Tunable constants for perception, motion and the control loop."""

    # Known target signatures; target_color picks the one the blob filter matches
    target_colors: dict[str, ColorSignature] = field(default_factory=_default_target_colors)
    target_color: str = "outdoor"

    # Blob perception: goal_found iff matching area > threshold (px^2)
    goal_area_threshold: float = 3000.0

    # Depth scan: points closer than near_range_m count as hits; obstacle iff hits > threshold
    near_range_m: float = 0.7
    near_point_threshold: int = 10
    scan_row_offset: int = 180
    scan_rows: int = 240

    # Camera image size (pixels)
    image_width: int = 640
    image_height: int = 480

    # Motion
    linear_speed: float = 0.15  # m/s
    angular_speed: float = 0.7  # rad/s
    angular_speed_thresh: float = 0.3  # seek yaw-rate clamp, rad/s
    seek_gain: float = 0.7
    seek_speed_factor: float = 0.7

    # AVOIDING -> ARRIVED when the goal fills more than this fraction of the frame
    arrival_area_fraction: float = 0.1

    # Control loop rate (Hz)
    loop_hz: float = 10.0

    # Escape maneuvers (seconds per step)
    escape_retreat_s: float = 1.2
    escape_rotate_s: float = 1.2
    escape_advance_s: float = 1.2
    forward_escape_s: float = 3.0

    log_level: str = "INFO"
    log_file: str = ""  # empty = stdout only

    # cmvision color file for the demo camera (empty = built-in classes)
    color_file: str = ""

    # JSONL transition log path (empty = disabled)
    events_log: str = ""

    @property
    def target_signature(self) -> ColorSignature:
        return self.target_colors[self.target_color]

    @property
    def arrival_area(self) -> float:
        return self.arrival_area_fraction * self.image_width * self.image_height

    @property
    def tick_period_s(self) -> float:
        return 1.0 / self.loop_hz

    def validate(self) -> None:
        """Raise ConfigError on values the controller cannot run with."""
        if self.target_color not in self.target_colors:
            known = ", ".join(sorted(self.target_colors))
            raise ConfigError(f"unknown target color {self.target_color!r} (known: {known})")
        for name, sig in self.target_colors.items():
            if len(sig) != 3 or any(not 0 <= c <= 255 for c in sig):
                raise ConfigError(f"color signature {name!r} must be three 0..255 values, got {sig!r}")
        if self.image_width <= 0 or self.image_height <= 0:
            raise ConfigError("image dimensions must be positive")
        if self.scan_row_offset < 0 or self.scan_rows <= 0:
            raise ConfigError("scan band must have a non-negative offset and positive height")
        if self.loop_hz <= 0:
            raise ConfigError("loop_hz must be positive")
        if self.angular_speed_thresh <= 0:
            raise ConfigError("angular_speed_thresh must be positive")
        for name in ("escape_retreat_s", "escape_rotate_s", "escape_advance_s", "forward_escape_s"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
