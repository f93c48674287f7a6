"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

A triangle is defined by three vertices v0, v1, v2. Its face normal follows
the right-hand rule: normalize(cross(v1 - v0, v2 - v0)). When per-vertex
normals are available the hit normal is interpolated from them with the
barycentric coordinates of the hit (smooth shading); otherwise the face normal
is used (flat shading).

The test first rejects rays parallel to the triangle's plane, then solves for
the barycentric coordinates (u, v) and the ray parameter t:

    origin + t * direction = (1 - u - v) * v0 + u * v1 + v * v2

A hit requires u >= 0, v >= 0, u + v <= 1 and t > t_min.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.triangle import hit_triangle_vertices
    >>> # Use hit_triangle_vertices within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.hit import HitRecord, make_hit, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# |normal . direction| below this counts as parallel to the plane
PARALLEL_EPSILON = 1e-8

# Twice the triangle area below this counts as degenerate (collinear vertices)
DEGENERATE_EPSILON = 1e-12


@ti.func
def triangle_normal(v0: vec3, v1: vec3, v2: vec3) -> vec3:
    """Unit face normal of a triangle by winding order."""
    return tm.normalize(tm.cross(v1 - v0, v2 - v0))


@ti.func
def hit_triangle_vertices(
    ray_origin: vec3,
    ray_direction: vec3,
    v0: vec3,
    v1: vec3,
    v2: vec3,
    n0: vec3,
    n1: vec3,
    n2: vec3,
    smooth: ti.i32,
    t_min: ti.f32,
) -> HitRecord:
    """Test for ray-triangle intersection given raw vertices.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        v0, v1, v2: Triangle vertices.
        n0, n1, n2: Per-vertex normals, only read when smooth == 1.
        smooth: 1 to interpolate the vertex normals, 0 for the face normal.
        t_min: Minimum t value to consider a valid hit (epsilon).

    Returns:
        A HitRecord containing intersection information. Degenerate
        triangles and rays parallel to the plane never hit.
    """
    result = make_miss()

    edge1 = v1 - v0
    edge2 = v2 - v0
    raw_normal = tm.cross(edge1, edge2)
    double_area = tm.length(raw_normal)

    if double_area > DEGENERATE_EPSILON:
        face_normal = raw_normal / double_area

        # Reject rays parallel to the plane before dividing
        if ti.abs(tm.dot(face_normal, ray_direction)) >= PARALLEL_EPSILON:
            pvec = tm.cross(ray_direction, edge2)
            det = tm.dot(edge1, pvec)

            if ti.abs(det) > DEGENERATE_EPSILON:
                inv_det = 1.0 / det
                tvec = ray_origin - v0
                u = tm.dot(tvec, pvec) * inv_det

                if u >= 0.0 and u <= 1.0:
                    qvec = tm.cross(tvec, edge1)
                    v = tm.dot(ray_direction, qvec) * inv_det

                    if v >= 0.0 and u + v <= 1.0:
                        t = tm.dot(edge2, qvec) * inv_det

                        if t > t_min:
                            point = ray_origin + t * ray_direction
                            normal = face_normal
                            if smooth == 1:
                                interpolated = (1.0 - u - v) * n0 + u * n1 + v * n2
                                # Opposing vertex normals can cancel out
                                if tm.dot(interpolated, interpolated) > DEGENERATE_EPSILON:
                                    normal = tm.normalize(interpolated)
                            result = make_hit(t, point, normal, ray_direction)

    return result
