"""Render-time configuration.

A RenderConfig is created once, handed to the Scene and forwarded to the render
kernels as arguments. It is frozen so a render never sees a parameter change
half way through.

Example:
    >>> from src.whitted.config import RenderConfig
    >>> config = RenderConfig(samples_per_side=2, max_depth=6)
    >>> config.samples_per_pixel
    4
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

# Capacity of the per-thread ray stack used by the integrator. A depth-first
# walk keeps at most one pending sibling per level, so the stack holds
# MAX_DEPTH_LIMIT + 2 entries.
MAX_DEPTH_LIMIT = 16

DEFAULT_SAMPLES_PER_SIDE = 1
DEFAULT_MAX_DEPTH = 10
DEFAULT_FOV_DEGREES = 60.0
DEFAULT_EPSILON = 1e-4


def _integer_option(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not float(value).is_integer()
    ):
        raise ValueError(f"{key} = {value!r} must be an integer")
    return int(value)


@dataclass(frozen=True)
class RenderConfig:
    """Parameters that stay fixed for the duration of a render.

    Attributes:
        samples_per_side: Side N of the N x N supersampling grid per pixel.
        max_depth: Maximum recursion depth for reflection/refraction rays.
            Rays spawned deeper than this contribute black.
        fov_degrees: Horizontal field of view in degrees.
        epsilon: Minimum ray parameter for a valid hit, also used as the
            offset applied to shadow, reflection and refraction ray origins.
    """

    samples_per_side: int = DEFAULT_SAMPLES_PER_SIDE
    max_depth: int = DEFAULT_MAX_DEPTH
    fov_degrees: float = DEFAULT_FOV_DEGREES
    epsilon: float = DEFAULT_EPSILON

    def __post_init__(self) -> None:
        if self.samples_per_side < 1:
            raise ValueError(
                f"samples_per_side = {self.samples_per_side} must be at least 1"
            )
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(
                f"max_depth = {self.max_depth} is outside [0, {MAX_DEPTH_LIMIT}]"
            )
        if not 0.0 < self.fov_degrees < 180.0:
            raise ValueError(
                f"fov_degrees = {self.fov_degrees} is outside (0, 180)"
            )
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon = {self.epsilon} must be positive")

    @property
    def samples_per_pixel(self) -> int:
        """Total number of camera rays traced per pixel."""
        return self.samples_per_side * self.samples_per_side

    @property
    def tan_half_fov(self) -> float:
        """Tangent of half the horizontal field of view."""
        return math.tan(math.radians(self.fov_degrees) / 2.0)

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderConfig:
        """Build a configuration from a dictionary.

        Missing keys take their defaults.

        Raises:
            ValueError: If a key is unknown, a count is not an integer or a
                value is out of range.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render options: {sorted(unknown)}")
        return cls(
            samples_per_side=_integer_option(data, "samples_per_side", DEFAULT_SAMPLES_PER_SIDE),
            max_depth=_integer_option(data, "max_depth", DEFAULT_MAX_DEPTH),
            fov_degrees=float(data.get("fov_degrees", DEFAULT_FOV_DEGREES)),
            epsilon=float(data.get("epsilon", DEFAULT_EPSILON)),
        )


def load_render_config(path: str | Path) -> RenderConfig:
    """Read a RenderConfig from a JSON file."""
    with open(path, encoding="utf-8") as f:
        return RenderConfig.from_dict(json.load(f))
