"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere dataclass and intersection function using the
robust quadratic formula from Ray Tracing Gems to avoid floating-point
artifacts. The same test is reused by triangle meshes to cull rays against
their bounding sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 3), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.hit import HitRecord, make_hit, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) avoids catastrophic cancellation
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def sphere_roots(ray_origin: vec3, ray_direction: vec3, center: vec3, radius: ti.f32):
    """Find the ray parameters where the ray crosses a sphere.

    Solves |ray_origin + t * ray_direction - center|^2 = radius^2 in the
    half-b form a*t^2 + 2*h*t + c = 0 with:
        a = dot(direction, direction)
        h = dot(direction, origin - center)
        c = dot(origin - center, origin - center) - radius^2

    Returns:
        Tuple (has_roots, t0, t1); t0 <= t1 when has_roots == 1. A negative
        discriminant gives has_roots == 0.
    """
    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = h * h - a * c

    has_roots = 0
    t0 = 0.0
    t1 = 0.0
    if discriminant >= 0.0 and a > 0.0:
        has_roots = 1
        r0, r1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))
        t0 = r0
        t1 = r1
    return has_roots, t0, t1


@ti.func
def nearest_sphere_t(ray_origin: vec3, ray_direction: vec3, center: vec3, radius: ti.f32, t_min: ti.f32):
    """Smallest sphere root strictly greater than t_min.

    Returns:
        Tuple (found, t). found == 0 when both roots are <= t_min or the ray
        misses the sphere.
    """
    has_roots, t0, t1 = sphere_roots(ray_origin, ray_direction, center, radius)
    found = 0
    t = 0.0
    if has_roots == 1:
        if t0 > t_min:
            found = 1
            t = t0
        elif t1 > t_min:
            found = 1
            t = t1
    return found, t


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Only roots with t > t_min count, which rejects both hits behind the ray
    origin and zero-distance self hits of rays leaving the surface. The
    returned normal always points outward, also for rays starting inside.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Minimum t value to consider a valid hit (epsilon).

    Returns:
        A HitRecord containing intersection information. Check hit field
        to determine if intersection occurred.
    """
    result = make_miss()

    found, t = nearest_sphere_t(ray_origin, ray_direction, sphere.center, sphere.radius, t_min)
    if found == 1:
        point = ray_origin + t * ray_direction
        normal = tm.normalize(point - sphere.center)
        result = make_hit(t, point, normal, ray_direction)

    return result
