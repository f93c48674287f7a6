"""Whitted-style ray casting integrator.

This module resolves the color seen along a camera ray and runs the main
render kernel. Light transport is deterministic: one ray per sub-sample, no
random sampling.

Material dispatch at the nearest hit:
    - Diffuse: direct Lambertian lighting from every unoccluded point light
    - Reflective: the color seen along the mirror ray
    - Refractive: kr * reflected color + (1 - kr) * refracted color, with kr
      from the Fresnel equations (kr = 1 under total internal reflection)

A ray spawned deeper than max_depth contributes black. Taichi functions
cannot recurse, so the shading tree is walked depth-first with a small ray
stack local to each thread. Every entry carries the weight of its path (the
product of the kr and 1 - kr factors above it); since the blend is linear,
summing weight * diffuse color over the leaves gives the same result as the
recursive evaluation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.config import RenderConfig
    >>> from src.whitted.core.integrator import render_to_numpy
    >>> pixels = render_to_numpy(320, 240, RenderConfig(samples_per_side=2))
    >>> pixels.shape
    (240, 320, 3)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import get_subpixel_ray
from src.whitted.config import MAX_DEPTH_LIMIT, RenderConfig
from src.whitted.core.ray import clamp_non_negative
from src.whitted.materials.dielectric import fresnel, refraction_ray
from src.whitted.materials.diffuse import shade_diffuse
from src.whitted.materials.material import (
    MaterialType,
    get_material_color,
    get_material_ior,
    get_material_type,
)
from src.whitted.materials.reflective import reflection_ray
from src.whitted.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# A depth-first walk keeps at most one pending sibling per level plus the two
# children just pushed.
STACK_SIZE = MAX_DEPTH_LIMIT + 2

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Color buffer indexed [x, y] with y = 0 the top row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


# =============================================================================
# Ray Casting
# =============================================================================


@ti.func
def cast_ray(origin: vec3, direction: vec3, max_depth: ti.i32, epsilon: ti.f32) -> vec3:
    """Resolve the color seen along a ray.

    Args:
        origin: Ray origin.
        direction: Normalized ray direction.
        max_depth: Maximum depth of spawned reflection/refraction rays. The
            primary ray has depth 0.
        epsilon: Minimum hit distance and secondary ray offset.

    Returns:
        The resolved color, clamped to be non-negative per channel.
    """
    color = vec3(0.0, 0.0, 0.0)

    # Ray stack, one component per vector to keep dynamic indexing cheap
    stack_ox = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_oy = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_oz = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_dx = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_dy = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_dz = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_weight = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_depth = ti.Vector.zero(ti.i32, STACK_SIZE)

    stack_ox[0] = origin[0]
    stack_oy[0] = origin[1]
    stack_oz[0] = origin[2]
    stack_dx[0] = direction[0]
    stack_dy[0] = direction[1]
    stack_dz[0] = direction[2]
    stack_weight[0] = 1.0
    stack_depth[0] = 0
    sp = 1

    while sp > 0:
        sp -= 1
        ray_origin = vec3(stack_ox[sp], stack_oy[sp], stack_oz[sp])
        ray_direction = vec3(stack_dx[sp], stack_dy[sp], stack_dz[sp])
        weight = stack_weight[sp]
        depth = stack_depth[sp]

        # Up to two child rays per hit
        num_children = 0
        first_origin = vec3(0.0, 0.0, 0.0)
        first_direction = vec3(0.0, 0.0, 1.0)
        first_weight = 0.0
        second_origin = vec3(0.0, 0.0, 0.0)
        second_direction = vec3(0.0, 0.0, 1.0)
        second_weight = 0.0

        if depth <= max_depth:
            rec = intersect_scene(ray_origin, ray_direction, epsilon)
            if rec.hit == 1:
                material_type = get_material_type(rec.material_id)

                if material_type == int(MaterialType.DIFFUSE):
                    base = get_material_color(rec.material_id)
                    color += weight * shade_diffuse(rec, base, epsilon)

                elif material_type == int(MaterialType.REFLECTIVE):
                    mirrored = reflection_ray(rec, epsilon)
                    first_origin = mirrored.origin
                    first_direction = mirrored.direction
                    first_weight = weight
                    num_children = 1

                elif material_type == int(MaterialType.REFRACTIVE):
                    ior = get_material_ior(rec.material_id)
                    kr = fresnel(rec.incident, rec.normal, ior)

                    mirrored = reflection_ray(rec, epsilon)
                    first_origin = mirrored.origin
                    first_direction = mirrored.direction
                    first_weight = weight * kr
                    num_children = 1

                    if kr < 1.0:
                        transmitted = refraction_ray(rec, ior, epsilon)
                        second_origin = transmitted.origin
                        second_direction = transmitted.direction
                        second_weight = weight * (1.0 - kr)
                        num_children = 2

        # Children deeper than max_depth would contribute black
        if depth + 1 > max_depth:
            num_children = 0

        if num_children >= 1 and sp < STACK_SIZE:
            stack_ox[sp] = first_origin[0]
            stack_oy[sp] = first_origin[1]
            stack_oz[sp] = first_origin[2]
            stack_dx[sp] = first_direction[0]
            stack_dy[sp] = first_direction[1]
            stack_dz[sp] = first_direction[2]
            stack_weight[sp] = first_weight
            stack_depth[sp] = depth + 1
            sp += 1

        if num_children >= 2 and sp < STACK_SIZE:
            stack_ox[sp] = second_origin[0]
            stack_oy[sp] = second_origin[1]
            stack_oz[sp] = second_origin[2]
            stack_dx[sp] = second_direction[0]
            stack_dy[sp] = second_direction[1]
            stack_dz[sp] = second_direction[2]
            stack_weight[sp] = second_weight
            stack_depth[sp] = depth + 1
            sp += 1

    return clamp_non_negative(color)


@ti.func
def _finite_or_zero(color: vec3) -> vec3:
    """Replace NaN or infinite channels by 0."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            result[c] = 0.0
    return result


@ti.func
def render_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_side: ti.i32,
    max_depth: ti.i32,
    tan_half_fov: ti.f32,
    epsilon: ti.f32,
) -> vec3:
    """Average the colors of a pixel's N x N supersampling grid."""
    total = vec3(0.0, 0.0, 0.0)
    for sy in range(samples_per_side):
        for sx in range(samples_per_side):
            ray = get_subpixel_ray(x, y, sx, sy, samples_per_side, width, height, tan_half_fov)
            total += cast_ray(ray.origin, ray.direction, max_depth, epsilon)

    n = ti.cast(samples_per_side * samples_per_side, ti.f32)
    return _finite_or_zero(total / n)


# =============================================================================
# Render Kernels
# =============================================================================


@ti.kernel
def _render_kernel(
    width: ti.i32,
    height: ti.i32,
    samples_per_side: ti.i32,
    max_depth: ti.i32,
    tan_half_fov: ti.f32,
    epsilon: ti.f32,
):
    """Render every pixel of a width x height image into the color buffer."""
    for x, y in ti.ndrange(width, height):
        _color_buffer[x, y] = render_pixel(
            x, y, width, height, samples_per_side, max_depth, tan_half_fov, epsilon
        )


@ti.kernel
def _cast_single_ray(
    origin: vec3, direction: vec3, max_depth: ti.i32, epsilon: ti.f32
) -> vec3:
    return cast_ray(origin, tm.normalize(direction), max_depth, epsilon)


@ti.kernel
def _render_single_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_side: ti.i32,
    max_depth: ti.i32,
    tan_half_fov: ti.f32,
    epsilon: ti.f32,
) -> vec3:
    return render_pixel(x, y, width, height, samples_per_side, max_depth, tan_half_fov, epsilon)


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image size {width}x{height} exceeds maximum "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
        )


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    config: RenderConfig | None = None,
) -> tuple[float, float, float]:
    """Resolve the color along a single ray against the uploaded scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized before tracing).
        config: Render parameters; defaults to RenderConfig().

    Returns:
        The resolved RGB color.
    """
    config = config or RenderConfig()
    color = _cast_single_ray(
        vec3(*origin), vec3(*direction), config.max_depth, config.epsilon
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_pixel_color(
    x: int, y: int, width: int, height: int, config: RenderConfig | None = None
) -> tuple[float, float, float]:
    """Render a single pixel (useful for debugging and tests)."""
    config = config or RenderConfig()
    _check_dimensions(width, height)
    color = _render_single_pixel(
        x,
        y,
        width,
        height,
        config.samples_per_side,
        config.max_depth,
        config.tan_half_fov,
        config.epsilon,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_to_numpy(
    width: int, height: int, config: RenderConfig | None = None
) -> npt.NDArray[np.float32]:
    """Render the uploaded scene and return the linear image.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        config: Render parameters; defaults to RenderConfig().

    Returns:
        Float32 array of shape (height, width, 3); row 0 is the top row.
        Values are non-negative and not clamped above.

    Raises:
        ValueError: If the dimensions are not positive or exceed the buffer.
    """
    config = config or RenderConfig()
    _check_dimensions(width, height)
    _render_kernel(
        width,
        height,
        config.samples_per_side,
        config.max_depth,
        config.tan_half_fov,
        config.epsilon,
    )
    # Buffer is [x, y]; transpose to (height, width, 3)
    buffer = _color_buffer.to_numpy()[:width, :height]
    return np.ascontiguousarray(buffer.transpose(1, 0, 2)).astype(np.float32)
