"""Diffuse (Lambertian) shading with hard shadows from point lights.

For every light the surface receives

    material_color * light_color * dot(normal, light_direction)

unless a shadow ray toward the light finds a primitive strictly closer than
the light. Per-light terms are summed without clamping; the sum is clamped to
be non-negative once, on return. A light behind the surface therefore
subtracts from the other lights before that final clamp.
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import clamp_non_negative, length_squared
from src.whitted.scene.intersection import SceneHitRecord, intersect_scene
from src.whitted.scene.lights import light_colors, light_positions, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def light_visible(point: vec3, light_position: vec3, epsilon: ti.f32) -> ti.i32:
    """Shadow test between a surface point and a point light.

    The shadow ray starts epsilon along the light direction to avoid hitting
    the surface it leaves. The light is occluded if the nearest hit along the
    shadow ray is strictly closer than the light (squared distances).

    Args:
        point: The surface point.
        light_position: The light position.
        epsilon: Origin offset and minimum hit distance.

    Returns:
        1 if the light is visible from the point, 0 if occluded.
    """
    direction = tm.normalize(light_position - point)
    shadow_origin = point + epsilon * direction
    blocker = intersect_scene(shadow_origin, direction, epsilon)

    visible = 1
    if blocker.hit == 1:
        if blocker.distance_sq < length_squared(light_position - shadow_origin):
            visible = 0
    return visible


@ti.func
def shade_diffuse(rec: SceneHitRecord, color: vec3, epsilon: ti.f32) -> vec3:
    """Direct Lambertian lighting at a hit from all point lights.

    Args:
        rec: The hit being shaded.
        color: The material's base color.
        epsilon: Shadow ray offset and minimum hit distance.

    Returns:
        The per-channel non-negative sum of the unoccluded light terms.
    """
    total = vec3(0.0, 0.0, 0.0)
    for i in range(num_lights[None]):
        position = light_positions[i]
        to_light = position - rec.point
        # A light sitting exactly on the surface has no direction
        if length_squared(to_light) > 0.0:
            if light_visible(rec.point, position, epsilon) == 1:
                light_dir = tm.normalize(to_light)
                total += color * light_colors[i] * tm.dot(rec.normal, light_dir)
    return clamp_non_negative(total)
