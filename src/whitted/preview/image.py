"""In-memory RGB image that the renderer writes pixels into.

The Scene only relies on ``width``, ``height`` and ``set_pixel``; anything
with those three members can be rendered into. Values are stored as linear
float32 and are not clamped above, so over-bright pixels are left to the
export step (tone mapping or clamping).
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from src.whitted.materials.material import Color, as_color


class Image:
    """Float32 RGB pixel buffer with row 0 at the top.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If either dimension is not positive.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self._pixels = np.zeros((self._height, self._width, 3), dtype=np.float32)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"Pixel ({x}, {y}) is outside the {self._width}x{self._height} image"
            )

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        """Store the color of pixel (x, y)."""
        self._check_bounds(x, y)
        self._pixels[y, x] = as_color(color)

    def get_pixel(self, x: int, y: int) -> Color:
        """Return the color of pixel (x, y)."""
        self._check_bounds(x, y)
        r, g, b = self._pixels[y, x]
        return (float(r), float(g), float(b))

    def fill(self, pixels: npt.NDArray[np.floating]) -> None:
        """Replace every pixel from a (height, width, 3) array."""
        expected = (self._height, self._width, 3)
        if pixels.shape != expected:
            raise ValueError(f"Pixel array shape {pixels.shape} does not match {expected}")
        self._pixels[...] = pixels

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Copy of the pixels as a (height, width, 3) float32 array."""
        return self._pixels.copy()

    def __repr__(self) -> str:
        return f"Image(width={self._width}, height={self._height})"
