"""Perfect mirror reflection.

A reflective surface does not shade itself: the color seen in it is exactly
the color resolved along the reflected ray.
"""

import taichi as ti

from src.whitted.core.hit import reflection_direction
from src.whitted.core.ray import Ray, offset_ray
from src.whitted.scene.intersection import SceneHitRecord


@ti.func
def reflection_ray(rec: SceneHitRecord, epsilon: ti.f32) -> Ray:
    """The mirror ray leaving a hit, offset epsilon along its direction."""
    direction = reflection_direction(rec.incident, rec.normal)
    return offset_ray(rec.point, direction, epsilon)
