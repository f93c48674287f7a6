"""Dielectric (glass/water) Fresnel reflectance.

At a dielectric boundary a fraction kr of the light is reflected and 1 - kr
is transmitted. kr is computed with the full Fresnel equations for
unpolarized light (the average of the s- and p-polarized reflectances):

    Rs = (etat cos_i - etai cos_t) / (etat cos_i + etai cos_t)
    Rp = (etai cos_i - etat cos_t) / (etai cos_i + etat cos_t)
    kr = (Rs^2 + Rp^2) / 2

The outside medium is air (index 1). When the incident ray travels along the
normal (cos_i > 0) it is inside the medium and the indices are swapped. If
Snell's law gives sin_t >= 1 the ray is totally internally reflected and
kr = 1.

At normal incidence this reduces to ((ior - 1) / (ior + 1))^2.
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.hit import refraction_direction
from src.whitted.core.ray import Ray, offset_ray
from src.whitted.scene.intersection import SceneHitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def fresnel(incident: vec3, normal: vec3, ior: ti.f32) -> ti.f32:
    """Compute the Fresnel reflectance kr at a dielectric boundary.

    Args:
        incident: The incident ray direction (normalized).
        normal: The unit surface normal as stored in the hit record.
        ior: Index of refraction of the medium (>= 1).

    Returns:
        The reflected fraction kr in [0, 1]; exactly 1 under total internal
        reflection.
    """
    cosi = tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    etai = 1.0
    etat = ior
    if cosi > 0.0:
        etai = ior
        etat = 1.0

    sint = etai / etat * ti.sqrt(ti.max(0.0, 1.0 - cosi * cosi))

    kr = 1.0
    if sint < 1.0:
        cost = ti.sqrt(ti.max(0.0, 1.0 - sint * sint))
        cosi = ti.abs(cosi)
        rs = ((etat * cosi) - (etai * cost)) / ((etat * cosi) + (etai * cost))
        rp = ((etai * cosi) - (etat * cost)) / ((etai * cosi) + (etat * cost))
        kr = (rs * rs + rp * rp) / 2.0
    return kr


@ti.func
def refraction_ray(rec: SceneHitRecord, ior: ti.f32, epsilon: ti.f32) -> Ray:
    """The transmitted ray leaving a hit, offset epsilon along its direction."""
    direction = refraction_direction(rec.incident, rec.normal, ior)
    return offset_ray(rec.point, direction, epsilon)
