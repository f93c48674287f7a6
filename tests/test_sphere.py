"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (outward normal)
- Ray missing sphere
- Ray starting inside sphere (normal still outward)
- Sphere entirely behind the ray
- Hits at or below t_min are rejected
- Hit positions lie on the surface
"""

import math

import numpy as np
import pytest
import taichi as ti


def _trace_sphere(origin, direction, center=(0.0, 0.0, 0.0), radius=1.0, t_min=1e-4):
    from src.whitted.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    ox, oy, oz = map(float, origin)
    dx, dy, dz = map(float, direction)
    cx, cy, cz = map(float, center)
    radius = float(radius)

    @ti.kernel
    def test_kernel():
        sphere = Sphere(center=vec3(cx, cy, cz), radius=radius)
        record = hit_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere, t_min)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal

    test_kernel()
    return hit[None], t_val[None], point[None].to_numpy(), normal[None].to_numpy()


class TestSphereIntersection:
    def test_hit_sphere_direct_hit(self):
        """Ray from z=5 toward the origin hits the front at t=4."""
        hit, t, point, normal = _trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert point == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)
        assert normal == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_hit_sphere_miss(self):
        hit, _, _, _ = _trace_sphere((5.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_hit_sphere_inside_keeps_outward_normal(self):
        hit, t, _, normal = _trace_sphere((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(1.0, abs=1e-5)
        assert normal == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_sphere_behind_ray(self):
        hit, _, _, _ = _trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_root_at_t_min_is_rejected(self):
        """A ray leaving the far surface does not re-hit it."""
        hit, _, _, _ = _trace_sphere((0.0, 0.0, -1.0), (0.0, 0.0, -1.0), t_min=1e-4)
        assert hit == 0

    def test_unnormalized_direction(self):
        hit, t, point, _ = _trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -2.0))
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert point == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_offset_center(self):
        hit, t, _, normal = _trace_sphere(
            (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), center=(0.0, 0.0, 3.0), radius=1.0
        )
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert normal == pytest.approx([0.0, 0.0, -1.0], abs=1e-5)

    @pytest.mark.parametrize("offset", [0.0, 0.3, 0.7, 0.95, 1.05, 2.0])
    def test_hit_iff_closest_approach_within_radius(self, offset):
        """Rays along -z at lateral offset hit iff offset <= r, on the surface."""
        center = np.array([0.5, -0.5, 0.0])
        radius = 1.0
        origin = (center[0] + offset, center[1], 6.0)
        hit, _, point, normal = _trace_sphere(origin, (0.0, 0.0, -1.0), tuple(center), radius)

        if offset < radius:
            assert hit == 1
            assert np.linalg.norm(point - center) == pytest.approx(radius, abs=1e-4)
            assert np.linalg.norm(normal) == pytest.approx(1.0, abs=1e-5)
        else:
            assert hit == 0

    def test_oblique_rays_land_on_surface(self):
        center = np.array([0.0, 0.0, 4.0])
        for angle in np.linspace(-0.2, 0.2, 5):
            direction = (math.sin(angle), 0.1, math.cos(angle))
            hit, _, point, _ = _trace_sphere((0.0, 0.0, 0.0), direction, tuple(center), 1.0)
            assert hit == 1
            assert np.linalg.norm(point - center) == pytest.approx(1.0, abs=1e-4)


class TestNearestSphereT:
    def test_returns_smallest_root_above_t_min(self):
        from src.whitted.geometry.sphere import nearest_sphere_t, vec3

        found = ti.field(dtype=ti.i32, shape=2)
        t_val = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            # Outside: near root at t=2
            f0, t0 = nearest_sphere_t(
                vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 3.0), 1.0, 1e-4
            )
            # Inside: only the far root is ahead
            f1, t1 = nearest_sphere_t(
                vec3(0.0, 0.0, 3.0), vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 3.0), 1.0, 1e-4
            )
            found[0] = f0
            t_val[0] = t0
            found[1] = f1
            t_val[1] = t1

        test_kernel()
        assert found[0] == 1
        assert t_val[0] == pytest.approx(2.0, abs=1e-5)
        assert found[1] == 1
        assert t_val[1] == pytest.approx(1.0, abs=1e-5)
