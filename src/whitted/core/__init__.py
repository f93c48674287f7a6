"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    hit: Hit records and the reflection/refraction directions derived from them
    integrator: The recursive ray caster and the render kernel

All per-ray work runs inside Taichi kernels.
"""

from .ray import (
    Ray,
    clamp_non_negative,
    length_squared,
    make_ray,
    offset_ray,
    ray_at,
    reflect,
    vec3,
)

# Note: hit and integrator are NOT imported here; integrator pulls in the
# scene storage. Import them directly from src.whitted.core.<module>.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "offset_ray",
    "vec3",
    "length_squared",
    "reflect",
    "clamp_non_negative",
]
