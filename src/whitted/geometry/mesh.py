"""Triangle mesh preparation: placement and bounding sphere.

Mesh vertices are placed in the world once, with a uniform scale followed by
an offset (vertex * scale + offset). The bounding sphere used to cull rays
before any face is tested is computed once from the min/max corners of the
placed vertices and never recomputed.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def place_vertices(
    vertices: npt.NDArray[np.float64],
    offset: tuple[float, float, float],
    scale: float,
) -> npt.NDArray[np.float64]:
    """Apply the uniform scale and then the offset to every vertex.

    Args:
        vertices: Model-space positions, shape (V, 3).
        offset: Translation applied after scaling.
        scale: Uniform scale factor (must be positive).

    Returns:
        World-space positions, shape (V, 3).

    Raises:
        ValueError: If scale is not positive.
    """
    if scale <= 0.0:
        raise ValueError(f"Mesh scale = {scale} must be positive")
    return np.asarray(vertices, dtype=np.float64) * scale + np.asarray(offset, dtype=np.float64)


def bounding_sphere(
    vertices: npt.NDArray[np.float64],
) -> tuple[tuple[float, float, float], float]:
    """Sphere enclosing the axis-aligned box of a vertex set.

    The center is the midpoint of the min and max corners; the radius is half
    the distance between them, so every vertex lies inside the sphere.

    Args:
        vertices: Positions, shape (V, 3).

    Returns:
        Tuple of (center, radius). An empty vertex set gives a zero-radius
        sphere at the origin.
    """
    if len(vertices) == 0:
        return (0.0, 0.0, 0.0), 0.0
    lo = vertices.min(axis=0)
    hi = vertices.max(axis=0)
    center = (lo + hi) / 2.0
    radius = float(np.linalg.norm(hi - lo)) / 2.0
    return (float(center[0]), float(center[1]), float(center[2])), radius
