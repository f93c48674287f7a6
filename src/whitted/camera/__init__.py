"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera at the origin looking down +z, with
        pixel to NDC mapping and regular-grid supersampling

Ray generation uses normalized device coordinates:
    x in [-1, 1]: left to right across image
    y in [-1, 1]: bottom to top across image
"""

from .pinhole import (
    CAMERA_ORIGIN,
    get_ray,
    get_subpixel_ray,
    pixel_to_ndc,
    primary_direction,
    subpixel_offsets,
)

__all__ = [
    "CAMERA_ORIGIN",
    "get_ray",
    "get_subpixel_ray",
    "pixel_to_ndc",
    "primary_direction",
    "subpixel_offsets",
]
