"""Preview module for image storage, output and display.

Components:
    image: Float32 RGB pixel buffer the renderer writes into
    display: Tone mapping and Matplotlib preview
    export: 8-bit PNG export via Pillow

Example:
    >>> from src.whitted.preview import Image, save_png
    >>> image = Image(320, 240)
    >>> scene.render(image)
    >>> save_png(image, "output.png")
"""

from src.whitted.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from src.whitted.preview.export import compute_rmse, image_to_uint8, save_png
from src.whitted.preview.image import Image

__all__ = [
    "Image",
    # Display functions
    "show_preview",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "image_to_uint8",
    "compute_rmse",
]
