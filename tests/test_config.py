"""Controller configuration: defaults, env overrides, validation."""

from __future__ import annotations

import os

import pytest

from targetseek.config import INDOOR_PINK, OUTDOOR_PINK, ConfigError, ControllerConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TARGETSEEK_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_reference_constants(self):
        cfg = ControllerConfig()
        assert cfg.target_signature == OUTDOOR_PINK
        assert cfg.target_colors["indoor"] == INDOOR_PINK
        assert cfg.goal_area_threshold == 3000
        assert cfg.near_range_m == 0.7
        assert cfg.near_point_threshold == 10
        assert (cfg.image_width, cfg.image_height) == (640, 480)
        assert cfg.arrival_area == pytest.approx(30720)
        assert cfg.tick_period_s == pytest.approx(0.1)

    def test_load_config_matches_defaults(self):
        assert load_config() == ControllerConfig()


class TestOverrides:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TARGETSEEK_NEAR_RANGE_M", "0.5")
        monkeypatch.setenv("TARGETSEEK_TARGET_COLOR", "Indoor")
        cfg = load_config()
        assert cfg.near_range_m == 0.5
        assert cfg.target_signature == INDOOR_PINK

    def test_argument_beats_env(self, monkeypatch):
        monkeypatch.setenv("TARGETSEEK_LOOP_HZ", "5")
        assert load_config(loop_hz=20.0).loop_hz == 20.0
        assert load_config().loop_hz == 5.0

    def test_scan_band_and_seek_overrides(self, monkeypatch):
        monkeypatch.setenv("TARGETSEEK_SCAN_ROW_OFFSET", "100")
        monkeypatch.setenv("TARGETSEEK_SEEK_GAIN", "0.5")
        cfg = load_config(scan_rows=120, seek_speed_factor=0.9)
        assert (cfg.scan_row_offset, cfg.scan_rows) == (100, 120)
        assert (cfg.seek_gain, cfg.seek_speed_factor) == (0.5, 0.9)

    def test_color_file_from_env(self, monkeypatch):
        monkeypatch.setenv("TARGETSEEK_COLOR_FILE", "conf/colors.txt")
        assert load_config().color_file == "conf/colors.txt"
        assert load_config(color_file="").color_file == ""

    def test_env_file(self, monkeypatch, tmp_path):
        # setenv first so monkeypatch removes whatever load_dotenv adds on teardown
        monkeypatch.setenv("TARGETSEEK_NEAR_POINT_THRESHOLD", "x")
        monkeypatch.delenv("TARGETSEEK_NEAR_POINT_THRESHOLD")
        env = tmp_path / ".env"
        env.write_text("TARGETSEEK_NEAR_POINT_THRESHOLD=25\n", encoding="utf-8")
        assert load_config(env_file=env).near_point_threshold == 25


class TestValidation:
    def test_unknown_color(self):
        with pytest.raises(ConfigError, match="unknown target color"):
            load_config(target_color="purple")

    def test_bad_number_in_env(self, monkeypatch):
        monkeypatch.setenv("TARGETSEEK_IMAGE_WIDTH", "wide")
        with pytest.raises(ConfigError, match="TARGETSEEK_IMAGE_WIDTH"):
            load_config()

    @pytest.mark.parametrize("kwargs", [
        {"loop_hz": 0.0},
        {"image_width": 0},
        {"angular_speed_thresh": 0.0},
        {"escape_retreat_s": -1.0},
        {"scan_rows": 0},
    ])
    def test_rejects_unusable_values(self, kwargs):
        with pytest.raises(ConfigError):
            load_config(**kwargs)

    def test_bad_signature(self):
        cfg = ControllerConfig(target_colors={"outdoor": (300, 0, 0)})
        with pytest.raises(ConfigError, match="color signature"):
            cfg.validate()

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
