"""Pinhole camera: maps pixel positions to world-space rays.

The camera sits at the world origin and looks down +z. A (possibly
fractional) pixel position is mapped to normalized device coordinates in
[-1, 1] x [-1, 1], with x growing to the right and y growing upward (so pixel
row 0 is the top of the image):

    ndc_x = 2 * px / width - 1
    ndc_y = 1 - 2 * py / height

The horizontal field of view fixes the image-plane extent at unit distance;
the vertical extent is divided by the aspect ratio (width / height):

    direction = normalize(ndc_x * tan(fov / 2), ndc_y * tan(fov / 2) / aspect, 1)

Pixel centers are at integer + 0.5. For N x N supersampling the sub-pixel
positions form a regular grid at (i + 0.5) / N, i = 0 .. N-1, inside each pixel.

Example:
    >>> from src.whitted.camera.pinhole import primary_direction
    >>> primary_direction(0.5, 0.5, 1, 1, 60.0)  # Straight ahead
    array([0., 0., 1.])
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, make_ray, vec3

CAMERA_ORIGIN = (0.0, 0.0, 0.0)


# =============================================================================
# Python-side helpers
# =============================================================================


def pixel_to_ndc(px: float, py: float, width: int, height: int) -> tuple[float, float]:
    """Map a pixel position to normalized device coordinates.

    Args:
        px: Horizontal pixel position (0 = left edge).
        py: Vertical pixel position (0 = top edge).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Tuple (ndc_x, ndc_y), each in [-1, 1] for positions inside the image.
    """
    return 2.0 * px / width - 1.0, 1.0 - 2.0 * py / height


def subpixel_offsets(samples_per_side: int) -> list[float]:
    """Offsets of the regular supersampling grid within one pixel."""
    return [(i + 0.5) / samples_per_side for i in range(samples_per_side)]


def primary_direction(
    px: float, py: float, width: int, height: int, fov_degrees: float
) -> npt.NDArray[np.float64]:
    """Unit direction of the camera ray through a pixel position.

    This is the NumPy counterpart of get_ray(), used for checks and tooling.
    """
    ndc_x, ndc_y = pixel_to_ndc(px, py, width, height)
    tan_half = math.tan(math.radians(fov_degrees) / 2.0)
    aspect = width / height
    direction = np.array([ndc_x * tan_half, ndc_y * tan_half / aspect, 1.0])
    return direction / np.linalg.norm(direction)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32, tan_half_fov: ti.f32) -> Ray:
    """Generate the camera ray through a pixel position.

    Args:
        px: Horizontal pixel position, fractional (0 = left edge).
        py: Vertical pixel position, fractional (0 = top edge).
        width: Image width in pixels.
        height: Image height in pixels.
        tan_half_fov: tan(horizontal field of view / 2).

    Returns:
        A Ray from the camera origin with a normalized direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    ndc_x = 2.0 * px / w - 1.0
    ndc_y = 1.0 - 2.0 * py / h
    aspect = w / h

    direction = tm.normalize(vec3(ndc_x * tan_half_fov, ndc_y * tan_half_fov / aspect, 1.0))
    return make_ray(vec3(CAMERA_ORIGIN[0], CAMERA_ORIGIN[1], CAMERA_ORIGIN[2]), direction)


@ti.func
def get_subpixel_ray(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    sample_x: ti.i32,
    sample_y: ti.i32,
    samples_per_side: ti.i32,
    width: ti.i32,
    height: ti.i32,
    tan_half_fov: ti.f32,
) -> Ray:
    """Generate the camera ray for one cell of a pixel's supersampling grid.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        sample_x: Grid column within the pixel, in [0, samples_per_side).
        sample_y: Grid row within the pixel, in [0, samples_per_side).
        samples_per_side: Side N of the N x N grid.
        width: Image width in pixels.
        height: Image height in pixels.
        tan_half_fov: tan(horizontal field of view / 2).
    """
    n = ti.cast(samples_per_side, ti.f32)
    px = ti.cast(pixel_x, ti.f32) + (ti.cast(sample_x, ti.f32) + 0.5) / n
    py = ti.cast(pixel_y, ti.f32) + (ti.cast(sample_y, ti.f32) + 0.5) / n
    return get_ray(px, py, width, height, tan_half_fov)
