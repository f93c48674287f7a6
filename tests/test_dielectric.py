"""Tests for Fresnel reflectance and secondary rays of dielectrics.

Tests cover:
- Normal incidence reflectance ((n - 1) / (n + 1))^2, from either side
- Total internal reflection beyond the critical angle (kr exactly 1)
- Reflectance growth toward grazing incidence
- Reflection and refraction rays leaving a hit, offset by epsilon
"""

import math

import pytest
import taichi as ti


def _fresnel(incident, normal, ior):
    from src.whitted.core.ray import vec3
    from src.whitted.materials.dielectric import fresnel

    result = ti.field(dtype=ti.f32, shape=())
    ix, iy, iz = incident
    nx, ny, nz = normal

    @ti.kernel
    def test_kernel():
        result[None] = fresnel(
            ti.math.normalize(vec3(ix, iy, iz)), vec3(nx, ny, nz), ior
        )

    test_kernel()
    return result[None]


class TestFresnel:
    @pytest.mark.parametrize("ior", [1.33, 1.5, 2.4])
    def test_normal_incidence(self, ior):
        expected = ((ior - 1.0) / (ior + 1.0)) ** 2
        kr = _fresnel((0.0, 0.0, 1.0), (0.0, 0.0, -1.0), ior)
        assert kr == pytest.approx(expected, abs=1e-5)

    def test_normal_incidence_from_inside(self):
        kr = _fresnel((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 1.5)
        assert kr == pytest.approx(0.04, abs=1e-5)

    def test_index_one_reflects_nothing(self):
        kr = _fresnel((0.3, -1.0, 0.0), (0.0, 1.0, 0.0), 1.0)
        assert kr == pytest.approx(0.0, abs=1e-6)

    def test_beyond_critical_angle_is_total(self):
        """Inside glass, sin(i) > 1 / 1.5 reflects everything."""
        critical = math.asin(1.0 / 1.5)
        angle = critical + math.radians(1.0)
        incident = (math.sin(angle), math.cos(angle), 0.0)
        assert _fresnel(incident, (0.0, 1.0, 0.0), 1.5) == 1.0

    def test_below_critical_angle_is_partial(self):
        critical = math.asin(1.0 / 1.5)
        angle = critical - math.radians(1.0)
        incident = (math.sin(angle), math.cos(angle), 0.0)
        assert _fresnel(incident, (0.0, 1.0, 0.0), 1.5) < 1.0

    def test_grazing_incidence_reflects_more(self):
        head_on = _fresnel((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1.5)
        grazing = _fresnel((1.0, -0.05, 0.0), (0.0, 1.0, 0.0), 1.5)
        assert grazing > head_on
        assert 0.0 <= grazing <= 1.0


class TestSecondaryRays:
    def test_reflection_and_refraction_rays_are_offset(self):
        from src.whitted.core.ray import vec3
        from src.whitted.materials.dielectric import refraction_ray
        from src.whitted.materials.reflective import reflection_ray
        from src.whitted.scene.intersection import SceneHitRecord

        reflect_origin = ti.field(dtype=ti.math.vec3, shape=())
        reflect_dir = ti.field(dtype=ti.math.vec3, shape=())
        refract_origin = ti.field(dtype=ti.math.vec3, shape=())
        refract_dir = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            rec = SceneHitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                incident=vec3(0.0, -1.0, 0.0),
                material_id=0,
                distance_sq=1.0,
            )
            mirrored = reflection_ray(rec, 0.01)
            transmitted = refraction_ray(rec, 1.5, 0.01)
            reflect_origin[None] = mirrored.origin
            reflect_dir[None] = mirrored.direction
            refract_origin[None] = transmitted.origin
            refract_dir[None] = transmitted.direction

        test_kernel()
        assert reflect_dir[None].to_numpy() == pytest.approx([0.0, 1.0, 0.0], abs=1e-6)
        assert reflect_origin[None].to_numpy() == pytest.approx([0.0, 0.01, 0.0], abs=1e-6)
        assert refract_dir[None].to_numpy() == pytest.approx([0.0, -1.0, 0.0], abs=1e-6)
        assert refract_origin[None].to_numpy() == pytest.approx([0.0, -0.01, 0.0], abs=1e-6)
