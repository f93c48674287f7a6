"""Scene module for primitive storage, lights and the render entry point.

Components:
    intersection: Taichi field storage for spheres, triangles and meshes,
        plus the nearest-hit query used by every ray
    lights: Point light storage
    manager: The Scene (primitive and light sets, upload, render, JSON)
    demo: Built-in demonstration scene

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Shared vertex/normal/face pools for all meshes
    - Material IDs resolved through src.whitted.materials.material
"""

from .intersection import (
    MAX_MESHES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    SceneHitRecord,
    add_mesh,
    add_sphere,
    add_triangle,
    clear_scene,
    get_mesh_count,
    get_sphere_count,
    get_triangle_count,
    intersect_scene,
)
from .lights import MAX_LIGHTS, add_light, clear_lights, get_light_count

# Note: manager and demo are NOT imported here; they depend on the integrator,
# which depends on this package. Import them directly from
# src.whitted.scene.<module>.

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "add_triangle",
    "add_mesh",
    "clear_scene",
    "get_sphere_count",
    "get_triangle_count",
    "get_mesh_count",
    "intersect_scene",
    "MAX_SPHERES",
    "MAX_TRIANGLES",
    "MAX_MESHES",
    # Lights module
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
]
