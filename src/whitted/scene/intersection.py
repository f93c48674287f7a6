"""Scene-level primitive storage and nearest-hit queries.

This module stores spheres, triangles and triangle meshes in Taichi fields and
answers "which primitive does this ray hit first?" for the shading code.

The nearest hit is the one with the smallest squared distance from the ray
origin to the hit position. Hits at distance zero never compete, so a ray
cannot re-absorb itself at its own origin. Between hits at exactly the same
distance on different primitives the first one tested is kept; the choice is
arbitrary and should not be relied on.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.intersection import (
    ...     add_sphere, add_triangle, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0, 0, 3), 1.0, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.hit import HitRecord, make_miss
from src.whitted.geometry.sphere import Sphere, hit_sphere, nearest_sphere_t
from src.whitted.geometry.triangle import hit_triangle_vertices

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Larger than any squared distance in a scene
FAR_DISTANCE_SQ = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The ray parameter of the intersection.
        point: The world-space hit position.
        normal: The unit surface normal at the hit position.
        incident: The direction of the ray that produced the hit.
        material_id: The material ID of the hit primitive. -1 on a miss.
        distance_sq: Squared distance from the ray origin to the hit.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    incident: vec3
    material_id: ti.i32
    distance_sq: ti.f32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_TRIANGLES = 4096
MAX_MESHES = 64
MAX_MESH_VERTICES = 1 << 17
MAX_MESH_NORMALS = 1 << 17
MAX_MESH_FACES = 1 << 17

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Standalone triangle storage; normals are only read when triangle_smooth == 1
triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_n0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_n1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_n2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_smooth = ti.field(dtype=ti.i32, shape=MAX_TRIANGLES)
triangle_material_ids = ti.field(dtype=ti.i32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Mesh table: each mesh owns a slice of the shared vertex/normal/face pools
mesh_bound_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESHES)
mesh_bound_radii = ti.field(dtype=ti.f32, shape=MAX_MESHES)
mesh_vertex_offsets = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_vertex_counts = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_normal_offsets = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_normal_counts = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_face_offsets = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_face_counts = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_material_ids = ti.field(dtype=ti.i32, shape=MAX_MESHES)
num_meshes = ti.field(dtype=ti.i32, shape=())

# Shared mesh pools. Face indices are local to their mesh and are NOT range
# checked on upload; the intersection routine skips faces that point outside.
mesh_vertices = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESH_VERTICES)
mesh_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESH_NORMALS)
mesh_face_vertices = ti.Vector.field(3, dtype=ti.i32, shape=MAX_MESH_FACES)
mesh_face_normals = ti.Vector.field(3, dtype=ti.i32, shape=MAX_MESH_FACES)
mesh_face_smooth = ti.field(dtype=ti.i32, shape=MAX_MESH_FACES)
num_mesh_vertices = ti.field(dtype=ti.i32, shape=())
num_mesh_normals = ti.field(dtype=ti.i32, shape=())
num_mesh_faces = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_triangles[None] = 0
    num_meshes[None] = 0
    num_mesh_vertices[None] = 0
    num_mesh_normals[None] = 0
    num_mesh_faces[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_triangle(
    v0: tuple[float, float, float],
    v1: tuple[float, float, float],
    v2: tuple[float, float, float],
    material_id: int = 0,
    normals: tuple[tuple[float, float, float], ...] | None = None,
) -> int:
    """Add a triangle to the scene.

    Args:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        material_id: The material ID to associate with this triangle.
        normals: Optional per-vertex normals (n0, n1, n2) for smooth shading.

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[idx] = vec3(v0[0], v0[1], v0[2])
    triangle_v1[idx] = vec3(v1[0], v1[1], v1[2])
    triangle_v2[idx] = vec3(v2[0], v2[1], v2[2])
    if normals is not None:
        n0, n1, n2 = normals
        triangle_n0[idx] = vec3(n0[0], n0[1], n0[2])
        triangle_n1[idx] = vec3(n1[0], n1[1], n1[2])
        triangle_n2[idx] = vec3(n2[0], n2[1], n2[2])
        triangle_smooth[idx] = 1
    else:
        triangle_smooth[idx] = 0
    triangle_material_ids[idx] = material_id
    num_triangles[None] = idx + 1
    return idx


@ti.kernel
def _write_rows(dst: ti.template(), src: ti.types.ndarray(), offset: ti.i32):
    for i in range(src.shape[0]):
        for k in ti.static(range(3)):
            dst[offset + i][k] = src[i, k]


@ti.kernel
def _write_scalars(dst: ti.template(), src: ti.types.ndarray(), offset: ti.i32):
    for i in range(src.shape[0]):
        dst[offset + i] = src[i]


def _reserve(counter, amount: int, capacity: int, what: str) -> int:
    start = int(counter[None])
    if start + amount > capacity:
        raise RuntimeError(f"Maximum number of {what} ({capacity}) exceeded")
    counter[None] = start + amount
    return start


def add_mesh(
    vertices: npt.NDArray[np.float64],
    normals: npt.NDArray[np.float64],
    face_vertices: npt.NDArray[np.int64],
    face_normals: npt.NDArray[np.int64],
    face_has_normals: npt.NDArray[np.bool_],
    bound_center: tuple[float, float, float],
    bound_radius: float,
    material_id: int = 0,
) -> int:
    """Add a triangle mesh to the scene.

    Vertices must already be placed in world space. Face indices are 0-based
    and local to this mesh's vertex/normal lists.

    Args:
        vertices: World-space vertex positions, shape (V, 3).
        normals: Vertex normals, shape (N, 3).
        face_vertices: Vertex indices per face, shape (F, 3).
        face_normals: Normal indices per face, shape (F, 3).
        face_has_normals: Whether each face uses its normal indices, shape (F,).
        bound_center: Center of the mesh's bounding sphere.
        bound_radius: Radius of the mesh's bounding sphere.
        material_id: The material ID to associate with this mesh.

    Returns:
        The index of the added mesh.

    Raises:
        RuntimeError: If the maximum number of meshes or the capacity of a
            mesh pool is exceeded.
    """
    idx = num_meshes[None]
    if idx >= MAX_MESHES:
        raise RuntimeError(f"Maximum number of meshes ({MAX_MESHES}) exceeded")

    vertex_count = len(vertices)
    normal_count = len(normals)
    face_count = len(face_vertices)
    vertex_start = _reserve(num_mesh_vertices, vertex_count, MAX_MESH_VERTICES, "mesh vertices")
    normal_start = _reserve(num_mesh_normals, normal_count, MAX_MESH_NORMALS, "mesh normals")
    face_start = _reserve(num_mesh_faces, face_count, MAX_MESH_FACES, "mesh faces")

    if vertex_count > 0:
        _write_rows(mesh_vertices, np.ascontiguousarray(vertices, dtype=np.float32), vertex_start)
    if normal_count > 0:
        _write_rows(mesh_normals, np.ascontiguousarray(normals, dtype=np.float32), normal_start)
    if face_count > 0:
        # Clip to the i32 range; anything clipped is out of range anyway
        limit = np.iinfo(np.int32)
        _write_rows(
            mesh_face_vertices,
            np.ascontiguousarray(np.clip(face_vertices, limit.min, limit.max), dtype=np.int32),
            face_start,
        )
        _write_rows(
            mesh_face_normals,
            np.ascontiguousarray(np.clip(face_normals, limit.min, limit.max), dtype=np.int32),
            face_start,
        )
        _write_scalars(
            mesh_face_smooth,
            np.ascontiguousarray(face_has_normals, dtype=np.int32),
            face_start,
        )

    mesh_bound_centers[idx] = vec3(bound_center[0], bound_center[1], bound_center[2])
    mesh_bound_radii[idx] = bound_radius
    mesh_vertex_offsets[idx] = vertex_start
    mesh_vertex_counts[idx] = vertex_count
    mesh_normal_offsets[idx] = normal_start
    mesh_normal_counts[idx] = normal_count
    mesh_face_offsets[idx] = face_start
    mesh_face_counts[idx] = face_count
    mesh_material_ids[idx] = material_id
    num_meshes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_triangle_count() -> int:
    """Get the number of standalone triangles in the scene."""
    return int(num_triangles[None])


def get_mesh_count() -> int:
    """Get the number of meshes in the scene."""
    return int(num_meshes[None])


@ti.func
def _to_scene_hit(rec: HitRecord, material_id: ti.i32, distance_sq: ti.f32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        incident=rec.incident,
        material_id=material_id,
        distance_sq=distance_sq,
    )


@ti.func
def make_scene_miss() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return _to_scene_hit(make_miss(), -1, 0.0)


@ti.func
def _indices_in_range(indices: tm.ivec3, count: ti.i32) -> ti.i32:
    ok = 1
    for k in ti.static(range(3)):
        if indices[k] < 0 or indices[k] >= count:
            ok = 0
    return ok


@ti.func
def hit_mesh(
    ray_origin: vec3,
    ray_direction: vec3,
    mesh_index: ti.i32,
    t_min: ti.f32,
) -> HitRecord:
    """Test a ray against one stored triangle mesh.

    The ray is first tested against the mesh's bounding sphere; if it misses,
    no face is tested. Otherwise every face is tested and the hit closest to
    the ray origin is kept. Faces referencing a vertex or normal outside the
    mesh's lists are skipped.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        mesh_index: Index into the mesh table.
        t_min: Minimum t value to consider a valid hit (epsilon).

    Returns:
        A HitRecord for the nearest face hit, or a miss record.
    """
    result = make_miss()

    in_bounds, _ = nearest_sphere_t(
        ray_origin,
        ray_direction,
        mesh_bound_centers[mesh_index],
        mesh_bound_radii[mesh_index],
        t_min,
    )

    if in_bounds == 1:
        vertex_offset = mesh_vertex_offsets[mesh_index]
        vertex_count = mesh_vertex_counts[mesh_index]
        normal_offset = mesh_normal_offsets[mesh_index]
        normal_count = mesh_normal_counts[mesh_index]
        face_offset = mesh_face_offsets[mesh_index]
        face_count = mesh_face_counts[mesh_index]
        closest_sq = FAR_DISTANCE_SQ

        for f in range(face_offset, face_offset + face_count):
            vi = mesh_face_vertices[f]
            ni = mesh_face_normals[f]
            smooth = mesh_face_smooth[f]

            valid = _indices_in_range(vi, vertex_count)
            if smooth == 1 and _indices_in_range(ni, normal_count) == 0:
                valid = 0

            if valid == 1:
                n0 = vec3(0.0, 0.0, 0.0)
                n1 = vec3(0.0, 0.0, 0.0)
                n2 = vec3(0.0, 0.0, 0.0)
                if smooth == 1:
                    n0 = mesh_normals[normal_offset + ni[0]]
                    n1 = mesh_normals[normal_offset + ni[1]]
                    n2 = mesh_normals[normal_offset + ni[2]]

                rec = hit_triangle_vertices(
                    ray_origin,
                    ray_direction,
                    mesh_vertices[vertex_offset + vi[0]],
                    mesh_vertices[vertex_offset + vi[1]],
                    mesh_vertices[vertex_offset + vi[2]],
                    n0,
                    n1,
                    n2,
                    smooth,
                    t_min,
                )
                if rec.hit == 1:
                    d_sq = tm.dot(rec.point - ray_origin, rec.point - ray_origin)
                    if d_sq > 0.0 and d_sq < closest_sq:
                        closest_sq = d_sq
                        result = rec

    return result


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
) -> SceneHitRecord:
    """Find the nearest primitive hit by a ray.

    Tests all spheres, triangles and meshes and keeps the hit with the
    smallest squared distance from the ray origin. Zero-distance hits are
    ignored.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit (epsilon).

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_sq = FAR_DISTANCE_SQ
    result = make_scene_miss()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min)
        if rec.hit == 1:
            d_sq = tm.dot(rec.point - ray_origin, rec.point - ray_origin)
            if d_sq > 0.0 and d_sq < closest_sq:
                closest_sq = d_sq
                result = _to_scene_hit(rec, sphere_material_ids[i], d_sq)

    for i in range(num_triangles[None]):
        rec = hit_triangle_vertices(
            ray_origin,
            ray_direction,
            triangle_v0[i],
            triangle_v1[i],
            triangle_v2[i],
            triangle_n0[i],
            triangle_n1[i],
            triangle_n2[i],
            triangle_smooth[i],
            t_min,
        )
        if rec.hit == 1:
            d_sq = tm.dot(rec.point - ray_origin, rec.point - ray_origin)
            if d_sq > 0.0 and d_sq < closest_sq:
                closest_sq = d_sq
                result = _to_scene_hit(rec, triangle_material_ids[i], d_sq)

    for i in range(num_meshes[None]):
        rec = hit_mesh(ray_origin, ray_direction, i, t_min)
        if rec.hit == 1:
            d_sq = tm.dot(rec.point - ray_origin, rec.point - ray_origin)
            if d_sq > 0.0 and d_sq < closest_sq:
                closest_sq = d_sq
                result = _to_scene_hit(rec, mesh_material_ids[i], d_sq)

    return result
