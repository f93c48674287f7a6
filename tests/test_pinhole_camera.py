"""Unit tests for the pinhole camera module.

Tests cover:
- Pixel to NDC mapping (x right, y up, row 0 at the top)
- Center ray looks straight down +z
- Horizontal field of view and aspect ratio
- Supersampling grid offsets
- Taichi ray generation agrees with the NumPy helper
"""

import math

import numpy as np
import pytest
import taichi as ti


def _get_ray(px, py, width, height, fov_degrees=60.0):
    from src.whitted.camera.pinhole import get_ray

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())
    tan_half = math.tan(math.radians(fov_degrees) / 2.0)

    @ti.kernel
    def test_kernel(x: ti.f32, y: ti.f32, w: ti.i32, h: ti.i32, t: ti.f32):
        ray = get_ray(x, y, w, h, t)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(px, py, width, height, tan_half)
    return origin[None].to_numpy(), direction[None].to_numpy()


class TestPixelToNdc:
    def test_corners_and_center(self):
        from src.whitted.camera.pinhole import pixel_to_ndc

        assert pixel_to_ndc(0.0, 0.0, 100, 50) == pytest.approx((-1.0, 1.0))
        assert pixel_to_ndc(100.0, 50.0, 100, 50) == pytest.approx((1.0, -1.0))
        assert pixel_to_ndc(50.0, 25.0, 100, 50) == pytest.approx((0.0, 0.0))

    def test_subpixel_offsets(self):
        from src.whitted.camera.pinhole import subpixel_offsets

        assert subpixel_offsets(1) == pytest.approx([0.5])
        assert subpixel_offsets(2) == pytest.approx([0.25, 0.75])
        assert subpixel_offsets(4) == pytest.approx([0.125, 0.375, 0.625, 0.875])


class TestPrimaryDirection:
    def test_center_looks_down_z(self):
        from src.whitted.camera.pinhole import primary_direction

        d = primary_direction(0.5, 0.5, 1, 1, 60.0)
        assert d == pytest.approx([0.0, 0.0, 1.0])

    def test_right_edge_matches_horizontal_fov(self):
        from src.whitted.camera.pinhole import primary_direction

        d = primary_direction(200.0, 50.0, 200, 100, 60.0)
        angle = math.degrees(math.atan2(d[0], d[2]))
        assert angle == pytest.approx(30.0, abs=1e-6)
        assert d[1] == pytest.approx(0.0)

    def test_vertical_extent_scaled_by_aspect(self):
        from src.whitted.camera.pinhole import primary_direction

        # Top edge of a 2:1 image: y = tan(30 deg) / 2 at z = 1
        d = primary_direction(100.0, 0.0, 200, 100, 60.0)
        assert d[1] / d[2] == pytest.approx(math.tan(math.radians(30.0)) / 2.0)
        assert d[1] > 0.0

    def test_unit_length(self):
        from src.whitted.camera.pinhole import primary_direction

        for px, py in [(0.0, 0.0), (13.7, 2.1), (64.0, 48.0)]:
            assert np.linalg.norm(primary_direction(px, py, 64, 48, 75.0)) == pytest.approx(1.0)


class TestGetRay:
    def test_origin_is_camera_origin(self):
        origin, direction = _get_ray(32.0, 24.0, 64, 48)
        assert origin == pytest.approx([0.0, 0.0, 0.0])
        assert direction == pytest.approx([0.0, 0.0, 1.0], abs=1e-6)

    @pytest.mark.parametrize("px, py", [(0.0, 0.0), (10.25, 3.75), (63.5, 47.5), (64.0, 48.0)])
    def test_matches_numpy_helper(self, px, py):
        from src.whitted.camera.pinhole import primary_direction

        _, direction = _get_ray(px, py, 64, 48, fov_degrees=60.0)
        assert direction == pytest.approx(primary_direction(px, py, 64, 48, 60.0), abs=1e-5)

    def test_top_rows_look_up(self):
        _, top = _get_ray(32.0, 0.5, 64, 48)
        _, bottom = _get_ray(32.0, 47.5, 64, 48)
        assert top[1] > 0.0
        assert bottom[1] < 0.0

    def test_subpixel_ray_uses_regular_grid(self):
        from src.whitted.camera.pinhole import get_subpixel_ray, primary_direction

        direction = ti.field(dtype=ti.math.vec3, shape=())
        tan_half = math.tan(math.radians(60.0) / 2.0)

        @ti.kernel
        def test_kernel():
            # Pixel (5, 7), cell (1, 2) of a 4 x 4 grid
            ray = get_subpixel_ray(5, 7, 1, 2, 4, 40, 30, tan_half)
            direction[None] = ray.direction

        test_kernel()
        expected = primary_direction(5.0 + 1.5 / 4.0, 7.0 + 2.5 / 4.0, 40, 30, 60.0)
        assert direction[None].to_numpy() == pytest.approx(expected, abs=1e-5)
