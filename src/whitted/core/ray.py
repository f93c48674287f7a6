"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the small vector helpers shared by
the intersection and shading code. All functions are Taichi functions and are
meant to be called from within kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Camera, shadow,
            reflection and refraction rays are always normalized; the
            intersection routines also accept unnormalized directions.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def offset_ray(point: vec3, direction: vec3, epsilon: ti.f32) -> Ray:
    """Create a secondary ray starting slightly off a surface.

    The origin is pushed epsilon along the new ray's own direction so the ray
    does not immediately re-hit the surface it leaves (shadow acne).

    Args:
        point: The surface point the ray leaves from.
        direction: The new ray direction (normalized).
        epsilon: Offset distance.

    Returns:
        A Ray from point + epsilon * direction along direction.
    """
    return Ray(origin=point + epsilon * direction, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Used for all distance comparisons (nearest hit, shadow occlusion), which
    avoids the square root.
    """
    return tm.dot(v, v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 * (incident . normal) * normal. The result does not
    depend on which side of the surface the normal points to.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def clamp_non_negative(color: vec3) -> vec3:
    """Clamp each color channel to be >= 0 (no negative light)."""
    return tm.max(color, vec3(0.0, 0.0, 0.0))
