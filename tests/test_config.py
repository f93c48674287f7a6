"""Tests for render configuration."""

import json
import math

import pytest

from src.whitted.config import MAX_DEPTH_LIMIT, RenderConfig, load_render_config


class TestRenderConfig:
    def test_defaults(self):
        config = RenderConfig()
        assert config.samples_per_side == 1
        assert config.max_depth == 10
        assert config.fov_degrees == 60.0
        assert config.epsilon == pytest.approx(1e-4)
        assert config.samples_per_pixel == 1
        assert config.tan_half_fov == pytest.approx(math.tan(math.radians(30.0)))

    def test_samples_per_pixel(self):
        assert RenderConfig(samples_per_side=3).samples_per_pixel == 9

    def test_frozen(self):
        config = RenderConfig()
        with pytest.raises(AttributeError):
            config.max_depth = 3

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"samples_per_side": 0},
            {"max_depth": -1},
            {"max_depth": MAX_DEPTH_LIMIT + 1},
            {"fov_degrees": 0.0},
            {"fov_degrees": 180.0},
            {"epsilon": 0.0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RenderConfig(**kwargs)

    def test_dict_round_trip(self):
        config = RenderConfig(samples_per_side=4, max_depth=3, fov_degrees=45.0, epsilon=1e-3)
        assert RenderConfig.from_dict(config.to_dict()) == config

    def test_from_dict_fills_defaults(self):
        assert RenderConfig.from_dict({"max_depth": 2}) == RenderConfig(max_depth=2)

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="Unknown"):
            RenderConfig.from_dict({"antialias": 4})

    @pytest.mark.parametrize(
        "data",
        [
            {"samples_per_side": 2.7},
            {"max_depth": 3.5},
            {"max_depth": "4"},
            {"samples_per_side": True},
        ],
    )
    def test_from_dict_rejects_non_integer_counts(self, data):
        with pytest.raises(ValueError, match="must be an integer"):
            RenderConfig.from_dict(data)

    def test_from_dict_accepts_integral_floats(self):
        config = RenderConfig.from_dict({"samples_per_side": 3.0, "max_depth": 4.0})
        assert config.samples_per_side == 3
        assert isinstance(config.max_depth, int)

    def test_load_render_config(self, tmp_path):
        path = tmp_path / "render.json"
        path.write_text(json.dumps({"samples_per_side": 2, "fov_degrees": 90}))
        config = load_render_config(path)
        assert config.samples_per_side == 2
        assert config.fov_degrees == 90.0
