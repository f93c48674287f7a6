"""Hit records and the secondary-ray directions derived from them.

A HitRecord is produced by every successful primitive intersection. It holds
the hit position, the unit surface normal (oriented by the producing
primitive: outward for spheres, by winding order for triangles) and the
incident ray direction. Reflection and refraction directions are derived on
demand from those three values.
"""

import taichi as ti
import taichi.math as tm

from .ray import reflect, vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The world-space hit position. Only valid if hit == 1.
        normal: The unit surface normal at the hit position. It is NOT flipped
            toward the ray; shading decides inside/outside from its sign
            relative to the incident direction. Only valid if hit == 1.
        incident: The direction of the ray that produced the hit.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    incident: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        incident=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def make_hit(t: ti.f32, point: vec3, normal: vec3, incident: vec3) -> HitRecord:
    """Create a HitRecord for a successful intersection."""
    return HitRecord(hit=1, t=t, point=point, normal=normal, incident=incident)


@ti.func
def reflection_direction(incident: vec3, normal: vec3) -> vec3:
    """Mirror reflection direction, normalized.

    Args:
        incident: The incident ray direction.
        normal: The unit surface normal.

    Returns:
        normalize(incident - 2 * (incident . normal) * normal).
    """
    return tm.normalize(reflect(incident, normal))


@ti.func
def refraction_direction(incident: vec3, normal: vec3, ior: ti.f32) -> vec3:
    """Refraction direction through a dielectric boundary (Snell's law).

    The outside medium is air (index 1). When the incident ray travels in the
    same direction as the normal (cosi > 0) the ray is inside the medium: the
    normal is flipped and the two indices are swapped.

    If the refraction is impossible (total internal reflection, k < 0) the
    reflection direction about the oriented normal is returned instead.

    Args:
        incident: The incident ray direction (normalized).
        normal: The unit surface normal as stored in the hit record.
        ior: Refractive index of the medium (>= 1).

    Returns:
        The normalized transmitted (or totally reflected) direction.
    """
    cosi = tm.dot(incident, normal)
    etai = 1.0
    etat = ior
    n = normal
    if cosi < 0.0:
        cosi = -cosi
    else:
        etai = ior
        etat = 1.0
        n = -normal

    eta = etai / etat
    k = 1.0 - eta * eta * (1.0 - cosi * cosi)

    result = vec3(0.0, 0.0, 0.0)
    if k < 0.0:
        result = tm.normalize(reflect(incident, n))
    else:
        result = tm.normalize(eta * incident + (eta * cosi - ti.sqrt(k)) * n)
    return result
