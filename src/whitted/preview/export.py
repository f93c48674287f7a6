"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from src.whitted.preview.export import save_png
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.preview.display import ToneMapMethod, process_image_for_display
from src.whitted.preview.image import Image

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to uint8.

    Values are clamped to [0, 1] (after optional tone mapping and gamma) and
    rounded to the nearest 8-bit level.

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma value; 1.0 writes linear values.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, tone_map=tone_map, gamma=gamma)
    return np.round(processed * 255.0).astype(np.uint8)


def save_png(
    image: Image | npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> None:
    """Save a rendered image (or a (H, W, 3) array) as an 8-bit RGB PNG.

    Args:
        image: The Image or linear array to save.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma value; 1.0 writes linear values.
    """
    pixels = image.to_numpy() if isinstance(image, Image) else np.asarray(image)
    image_uint8 = image_to_uint8(pixels, tone_map=tone_map, gamma=gamma)

    pil_image = PILImage.fromarray(image_uint8, mode="RGB")
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image_uint8.shape[1], image_uint8.shape[0], filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
